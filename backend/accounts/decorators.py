from functools import wraps
from django.http import HttpResponseForbidden


def require_roles(*roles, allow_superuser=False):
    """
    Usage:
    @require_roles(Role.MANAGER, Role.SUPERVISOR, allow_superuser=True)
    def view(request): ...

    allow_superuser lets SUPER_ADMIN (or a Django superuser) through
    regardless of the listed roles.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            u = request.user
            if not u.is_authenticated:
                return HttpResponseForbidden("Auth required.")
            if not u.is_active:
                return HttpResponseForbidden("Account disabled.")
            if allow_superuser and (u.is_superuser or u.role == "SUPER_ADMIN"):
                return view_func(request, *args, **kwargs)
            if u.role in roles:
                return view_func(request, *args, **kwargs)
            return HttpResponseForbidden("Insufficient role.")
        return _wrapped
    return decorator
