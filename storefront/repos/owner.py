# storefront/repos/owner.py
from sqlalchemy import and_, false

from storefront.domain.identity import Identity


def owned_by(model, identity: Identity):
    """Warunek WHERE: rekord nalezy do usera albo do goscia z tym tokenem."""
    if identity.user_id is not None:
        return model.user_id == identity.user_id
    if identity.guest_token:
        return and_(model.user_id.is_(None), model.guest_token == identity.guest_token)
    return false()
