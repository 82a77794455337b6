# circularbuild/gateways/message_gateway.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from circularbuild.gateways.interfaces import IMessageGateway
from circularbuild.infrastructure import models
from circularbuild.infrastructure.data_mappers import MessageMapper
from circularbuild.infrastructure.uow import UnitOfWork, UoWModel


class MessageGateway(IMessageGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.Message] = MessageMapper(session)

    async def create_message(self, chat_id: int, sender_id: str, body: str) -> UoWModel:
        db_message = models.Message(chat_id=chat_id, sender_id=sender_id, body=body)
        uow_message = self.uow.register_new(db_message)
        await self.uow.commit()
        return uow_message

    async def get_messages(self, chat_id: int, after_id: Optional[int] = None) -> List[models.Message]:
        stmt = select(models.Message).filter(models.Message.chat_id == chat_id)
        if after_id is not None:
            stmt = stmt.filter(models.Message.id > after_id)
        stmt = stmt.order_by(models.Message.created_at, models.Message.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
