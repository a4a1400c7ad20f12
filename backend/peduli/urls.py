from django.conf import settings
from django.contrib import admin
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.urls import include, path



def health(_):
    return JsonResponse({"ok": True})


@login_required
def whoami(request):
    u = request.user
    return JsonResponse({
        "id": u.pk,
        "email": u.email,
        "name": u.display_name,
        "role": u.role,
        "verified_at": u.verified_at,
    })


urlpatterns = [
    path("health/", health),
    path(f"{settings.ADMIN_URL}/", admin.site.urls),
    path("whoami/", whoami),
    path("", include("approvals.urls")),
    path("", include("programs.urls")),
    path("", include("articles.urls")),
    path("", include("pengusul.urls")),
    path("", include("finance.urls")),
    path("", include("ops.urls")),
]
