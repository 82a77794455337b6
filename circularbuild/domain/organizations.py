# circularbuild/domain/organizations.py
from pydantic import BaseModel


class OrganizationPartner(BaseModel):
    slug: str
    name: str
    description: str
    region: str | None = None


ORGANIZATION_PARTNERS: list[OrganizationPartner] = [
    OrganizationPartner(
        slug="reuse-alliance",
        name="Reuse Alliance",
        description=(
            "Regional coalition of materials recovery non-profits focused on scaling "
            "deconstruction and donation logistics."
        ),
        region="North America",
    ),
    OrganizationPartner(
        slug="circular-builders-coalition",
        name="Circular Builders Coalition",
        description=(
            "Mission-driven builders and architects who commit to landfill diversion "
            "targets on every project."
        ),
        region="International",
    ),
    OrganizationPartner(
        slug="campus-build-labs",
        name="Campus Build Labs",
        description=(
            "University labs and student build clubs partnering with community "
            "organizations for adaptive reuse."
        ),
        region="Universities",
    ),
    OrganizationPartner(
        slug="community-material-exchange",
        name="Community Material Exchange",
        description=(
            "Local exchanges that connect homeowners, small contractors, and mutual aid "
            "groups with reclaimed stock."
        ),
        region="Local chapters",
    ),
]


def get_organization_by_slug(slug: str | None) -> OrganizationPartner | None:
    if not slug:
        return None
    return next((org for org in ORGANIZATION_PARTNERS if org.slug == slug), None)
