"""
Owner resolution

The core never checks credentials itself. It asks an OwnerResolver to turn
an inbound request into an owner id, and treats None as "not authenticated".
The resolver class is chosen by settings.WASTELOG_OWNER_RESOLVER.
"""

from django.conf import settings
from django.utils.module_loading import import_string

from .exceptions import Unauthorized

DEFAULT_OWNER_RESOLVER = 'wastelog.owners.SessionOwnerResolver'


class OwnerResolver:
    """Capability interface: request -> owner id or None"""

    def resolve_owner(self, request):
        raise NotImplementedError


class SessionOwnerResolver(OwnerResolver):
    """Resolve the owner from Django's session authentication"""

    def resolve_owner(self, request):
        user = getattr(request, 'user', None)
        if user is None or not user.is_authenticated or not user.is_active:
            return None
        return user.pk


def get_owner_resolver():
    resolver_class = import_string(
        getattr(settings, 'WASTELOG_OWNER_RESOLVER', DEFAULT_OWNER_RESOLVER)
    )
    return resolver_class()


def require_owner(request, resolver=None):
    """
    Return the request's owner id

    Raises:
        Unauthorized: if the resolver cannot resolve an owner
    """
    resolver = resolver or get_owner_resolver()
    owner_id = resolver.resolve_owner(request)
    if owner_id is None:
        raise Unauthorized()
    return owner_id
