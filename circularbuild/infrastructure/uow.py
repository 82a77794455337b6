# circularbuild/infrastructure/uow.py

from typing import Any, Dict, Type


class UoWModel:
    """Proxy around an ORM row; attribute writes mark the row dirty."""

    def __init__(self, model: Any, uow: "UnitOfWork"):
        self.__dict__["_model"] = model
        self.__dict__["_uow"] = uow

    def __getattr__(self, key):
        return getattr(self._model, key)

    def __setattr__(self, key, value):
        setattr(self._model, key, value)
        # pending rows get flushed as inserts anyway
        if id(self._model) not in self._uow.new:
            self._uow.register_dirty(self._model)


def _unwrap(model: Any) -> Any:
    return model._model if isinstance(model, UoWModel) else model


class UnitOfWork:
    """Collects writes for one request and flushes them in a fixed order.

    Flushing happens inside the request's session transaction; the session
    dependency owns the final COMMIT or ROLLBACK, so a failure anywhere in
    the request discards every staged write together.
    """

    def __init__(self) -> None:
        self.new: Dict[int, Any] = {}
        self.dirty: Dict[int, Any] = {}
        self.deleted: Dict[int, Any] = {}
        self.mappers: Dict[Type, Any] = {}

    def wrap(self, model: Any) -> UoWModel | None:
        return UoWModel(model, self) if model is not None else None

    def register_new(self, model: Any) -> UoWModel:
        model = _unwrap(model)
        self.new[id(model)] = model
        return UoWModel(model, self)

    def register_dirty(self, model: Any) -> None:
        model = _unwrap(model)
        model_id = id(model)
        if model_id in self.new or model_id in self.deleted:
            return
        self.dirty[model_id] = model

    def register_deleted(self, model: Any) -> None:
        model = _unwrap(model)
        model_id = id(model)
        if self.new.pop(model_id, None) is not None:
            # never reached the database
            return
        self.dirty.pop(model_id, None)
        self.deleted[model_id] = model

    def mapper_for(self, model: Any):
        try:
            return self.mappers[type(model)]
        except KeyError:
            raise LookupError(
                f"No data mapper registered for {type(model).__name__}"
            ) from None

    @property
    def has_pending(self) -> bool:
        return bool(self.new or self.dirty or self.deleted)

    async def commit(self) -> None:
        for model in list(self.new.values()):
            await self.mapper_for(model).insert(model)
        for model in list(self.dirty.values()):
            await self.mapper_for(model).update(model)
        for model in list(self.deleted.values()):
            await self.mapper_for(model).delete(model)

        self.new.clear()
        self.dirty.clear()
        self.deleted.clear()
