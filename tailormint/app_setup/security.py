# module tailormint.app_setup.security
"""
Middleware de sécurité:
- CSRF (double submit): sur requête mutative authentifiée par cookie, X-CSRF-Token doit égaler le cookie csrf_token.
  Les appels Bearer (pas de cookie de session) et le webhook Stripe en sont exemptés.
- En-têtes: X-Frame-Options, X-Content-Type-Options, Referrer-Policy, Permissions-Policy, HSTS (si secure), CSP.
- Dépose un cookie CSRF si manquant (httponly=False pour que le front lise la valeur).
"""
import secrets
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from tailormint.config import COOKIE_SECURE
from tailormint.utils.security import COOKIE_NAME

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_EXEMPT_PATHS = {
    "/api/v1/stripe/webhook",
}
STATE_CHANGING = ("POST", "PUT", "PATCH", "DELETE")


def is_csrf_exempt(path: str) -> bool:
    return (path.rstrip("/") or "/") in CSRF_EXEMPT_PATHS


def csrf_ok(request: Request) -> bool:
    if request.method.upper() not in STATE_CHANGING:
        return True
    if not request.cookies.get(COOKIE_NAME) or is_csrf_exempt(request.url.path):
        return True
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME) or ""
    header_token = request.headers.get(CSRF_HEADER_NAME) or ""
    return bool(cookie_token and header_token and secrets.compare_digest(header_token, cookie_token))


def register_security_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        if not csrf_ok(request):
            return JSONResponse(status_code=403, content={"error": "CSRF verification failed", "code": "csrf_failed"})

        response = await call_next(request)

        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
        if COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")
        # Swagger (/docs) charge ses assets depuis jsdelivr
        swagger_cdn = "https://cdn.jsdelivr.net"
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; base-uri 'self'; object-src 'none'; frame-ancestors 'none'; "
            f"img-src 'self' data: https://fastapi.tiangolo.com; "
            f"style-src 'self' 'unsafe-inline' {swagger_cdn}; "
            f"script-src 'self' 'unsafe-inline' {swagger_cdn}",
        )

        if not request.cookies.get(CSRF_COOKIE_NAME):
            response.set_cookie(
                key=CSRF_COOKIE_NAME,
                value=secrets.token_urlsafe(32),
                httponly=False,
                secure=COOKIE_SECURE,
                samesite="Lax",
                max_age=60 * 60,
                path="/",
            )
        return response
