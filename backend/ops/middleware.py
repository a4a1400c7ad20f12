import time, logging, os
from django.conf import settings
from django.utils.deprecation import MiddlewareMixin
from django.utils.timezone import now

log = logging.getLogger("request")
REDACT = os.getenv("REDACT_PII_IN_LOGS", "1") == "1"

REDACT_KEYS = {"password", "email", "donor_email", "ktp_number", "phone"}


def _log_requests() -> bool:
    return getattr(settings, "LOG_REQUESTS", os.getenv("LOG_REQUESTS", "1") == "1")


def _scrub(keys):
    if not REDACT:
        return list(keys)
    return ["***redacted***" if k.lower() in REDACT_KEYS else k for k in keys]


class RequestLogMiddleware(MiddlewareMixin):
    def process_request(self, request):
        if not _log_requests():
            return
        request._ts = time.time()

    def process_response(self, request, response):
        if not _log_requests():
            return response
        try:
            dur = time.time() - getattr(request, "_ts", time.time())
            u = getattr(request, "user", None)
            payload = {
                "ts": now().isoformat(),
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": int(dur * 1000),
                "user": (u.pk if u and u.is_authenticated else None),
                "role": (getattr(u, "role", None) if u and u.is_authenticated else None),
                "ip": request.META.get("REMOTE_ADDR"),
                "ua": request.META.get("HTTP_USER_AGENT", ""),
            }
            # Only log POST bodies minimally
            if request.method in ("POST", "PUT", "PATCH"):
                payload["body_keys"] = _scrub(getattr(request, "POST", {}).keys())
            log.info("%s %s %s", request.method, request.path, response.status_code, extra=payload)
        except Exception:
            log.debug("request log failed", exc_info=True)
        return response
