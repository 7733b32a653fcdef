from __future__ import annotations

import json
import logging
from typing import Any, Final

from fastapi import BackgroundTasks, Body, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .applicants import (
    ApplicantResolver,
    ConsentStore,
    PhoneKeyResolver,
    UnpersistedConsentStore,
)
from .config import Settings, get_settings
from .errors import AuthError, ConfigurationError, RelayError, ValidationError
from .interviewers import InterviewerDirectory, StaticInterviewerDirectory
from .pipeline import ReplyDispatcher
from .records import Applicant, ApplicantStatusUpdate, Decision, new_applicant_id, now_iso
from .remote import RemoteStateClient
from .scheduling import next_slot_for_interviewer
from .schemas import (
    ApplicationRequest,
    DecisionRequest,
    NextSlotRequest,
    SmsSendRequest,
    require_fields,
)
from .signature import verify_signature
from .sms import InboundSms
from .templates import StaticTemplateStore, TemplateStore, render_template
from .twilio_client import SmsSender

logger = logging.getLogger(__name__)

app = FastAPI(title="recruit-relay", version="0.1.0")

CORS_ALLOW_METHODS: Final[str] = "GET, POST, OPTIONS"
CORS_ALLOW_HEADERS: Final[str] = "Content-Type, Authorization, Idempotency-Key"
CORS_MAX_AGE: Final[str] = "86400"

MIN_PHONE_LENGTH: Final[int] = 10

# Decision values that map onto an applicant status; anything else passes through.
DECISION_STATUS: Final[dict[str, str]] = {"pass": "pass", "hold": "hold", "fail": "fail"}


def cors_headers(settings: Settings) -> dict[str, str]:
    """Built per request so concurrent requests never share a mutable header map."""
    return {
        "Access-Control-Allow-Origin": settings.allowed_origin,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
        "Access-Control-Max-Age": CORS_MAX_AGE,
    }


def ok_response(**data: Any) -> JSONResponse:
    return JSONResponse({"ok": True, **data})


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"ok": False, "error": message}, status_code=status_code)


# --- Middleware & error envelope ---


@app.middleware("http")
async def cors_and_envelope(request: Request, call_next):
    headers = cors_headers(get_settings())
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=headers)

    try:
        response = await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = error_response(500, "Internal Server Error")

    response.headers.update(headers)
    return response


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    else:
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Routing is an exact method + path match: a known path with the wrong method is a 404 too.
    if exc.status_code in (404, 405):
        return error_response(404, "Not Found")
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted(
        {".".join(str(part) for part in err.get("loc", ())[1:]) or "body" for err in exc.errors()}
    )
    return error_response(400, f"Invalid request fields: {', '.join(fields)}")


# --- Dependencies ---


def get_remote_client(settings: Settings = Depends(get_settings)) -> RemoteStateClient:
    return RemoteStateClient.from_settings(settings)


def get_sms_sender(settings: Settings = Depends(get_settings)) -> SmsSender:
    return SmsSender(settings)


def get_template_store() -> TemplateStore:
    return StaticTemplateStore()


def get_interviewer_directory() -> InterviewerDirectory:
    return StaticInterviewerDirectory()


def get_applicant_resolver() -> ApplicantResolver:
    return PhoneKeyResolver()


def get_consent_store() -> ConsentStore:
    return UnpersistedConsentStore()


def get_reply_dispatcher(
    remote: RemoteStateClient = Depends(get_remote_client),
    sms: SmsSender = Depends(get_sms_sender),
    settings: Settings = Depends(get_settings),
    consent_store: ConsentStore = Depends(get_consent_store),
    directory: InterviewerDirectory = Depends(get_interviewer_directory),
) -> ReplyDispatcher:
    return ReplyDispatcher(
        remote=remote,
        sms=sms,
        settings=settings,
        consent_store=consent_store,
        directory=directory,
    )


def signed_url(request: Request, settings: Settings) -> str:
    """The URL Twilio signed: the public base URL when configured, else the request URL."""
    if not settings.public_base_url:
        return str(request.url)
    url = settings.public_base_url.rstrip("/") + request.url.path
    if request.url.query:
        url += "?" + request.url.query
    return url


def dispatch_inbound(dispatcher: ReplyDispatcher, inbound: InboundSms, applicant_id: str) -> None:
    """
    Background task for a verified inbound SMS.

    Twilio has already received its 200, so failures end here in the log
    instead of triggering provider-side retries.
    """
    try:
        outcome = dispatcher.handle(inbound, applicant_id)
    except Exception:
        logger.exception("Inbound SMS dispatch failed for %s", applicant_id)
        return
    logger.info("Inbound SMS for %s handled: intent=%s", applicant_id, outcome.intent.value)


# --- Routes ---


@app.post("/api/applications")
def create_application(
    payload: ApplicationRequest,
    remote: RemoteStateClient = Depends(get_remote_client),
) -> JSONResponse:
    """
    Application intake.

    Requires an E.164 phone and a truthy consent_flg; stores a pending
    applicant and writes one system note to the message log.
    """
    require_fields(payload, "phone", "consent_flg")
    phone = payload.phone or ""
    if not phone.startswith("+") or len(phone) < MIN_PHONE_LENGTH:
        raise ValidationError("Invalid phone format. Use E.164 format (+819012345678)")

    applicant = Applicant(
        applicant_id=new_applicant_id(),
        created_at=now_iso(),
        name=payload.name or "",
        phone=phone,
        source=payload.source or "Web",
        consent_flg=payload.consent_flg,
        notes=payload.notes or "",
    )
    remote.save_applicant(applicant)

    received = json.dumps(payload.model_dump(exclude_none=True), ensure_ascii=False)
    remote.log_message(
        applicant.applicant_id,
        "sys",
        f"Application received: {received}",
        channel="note",
    )
    logger.info("Application %s received from %s", applicant.applicant_id, applicant.source)
    return ok_response(applicant_id=applicant.applicant_id)


@app.post("/api/second/next-slot")
def second_interview_next_slot(
    payload: NextSlotRequest,
    remote: RemoteStateClient = Depends(get_remote_client),
    settings: Settings = Depends(get_settings),
    directory: InterviewerDirectory = Depends(get_interviewer_directory),
) -> JSONResponse:
    require_fields(payload, "interviewer_id")
    slot_at = next_slot_for_interviewer(remote, settings, directory, payload.interviewer_id or "")
    return ok_response(slotAt=slot_at)


@app.post("/api/sms/send")
def send_sms_message(
    payload: SmsSendRequest,
    remote: RemoteStateClient = Depends(get_remote_client),
    sms: SmsSender = Depends(get_sms_sender),
    templates: TemplateStore = Depends(get_template_store),
    resolver: ApplicantResolver = Depends(get_applicant_resolver),
) -> JSONResponse:
    """
    Send one SMS, either a literal body or a rendered template.

    An explicit body wins over templateId. The message is logged under
    applicant_id when given, otherwise under the recipient's phone key.
    """
    require_fields(payload, "to")
    to = payload.to or ""

    text = payload.body
    if payload.templateId and not text:
        text = render_template(payload.templateId, payload.variables, templates)
    if not text:
        raise ValidationError("body or templateId is required")

    result = sms.send(to, text)
    applicant_id = payload.applicant_id or resolver.resolve(to)
    remote.log_message(applicant_id, "out", text)
    return ok_response(sid=result.sid, status=result.status)


@app.post("/twilio/inbound-sms")
async def twilio_inbound_sms(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    resolver: ApplicantResolver = Depends(get_applicant_resolver),
    dispatcher: ReplyDispatcher = Depends(get_reply_dispatcher),
) -> Response:
    """
    Twilio inbound SMS webhook.

    Behaviour:
      - verify X-Twilio-Signature against the raw form body
      - schedule reply handling as a background task
      - return an empty 200 straight away, whatever the task does later
    """
    raw_body = await request.body()
    signature = request.headers.get("X-Twilio-Signature")
    if not signature:
        raise AuthError("Missing Twilio signature")
    if not settings.twilio_auth_token:
        raise ConfigurationError("TWILIO_AUTH_TOKEN is not configured")
    if not verify_signature(raw_body, signature, signed_url(request, settings), settings.twilio_auth_token):
        logger.warning("Rejected inbound SMS with invalid signature for %s", request.url.path)
        raise AuthError("Invalid Twilio signature")

    # Starlette caches the body, so the form can still be parsed after the signature check.
    form = await request.form()
    from_number = str(form.get("From") or "").strip()
    if not from_number:
        raise ValidationError("Missing required fields: From")
    # A blank Body still goes through dispatch so it lands in the message log.
    text = str(form.get("Body") or "")

    inbound = InboundSms(phone=from_number, text=text)
    background_tasks.add_task(dispatch_inbound, dispatcher, inbound, resolver.resolve(from_number))
    return Response(status_code=200)


@app.get("/api/interviewers")
def list_interviewers(
    directory: InterviewerDirectory = Depends(get_interviewer_directory),
) -> JSONResponse:
    return ok_response(interviewers=[i.model_dump() for i in directory.list_all()])


@app.post("/api/interviewers")
def upsert_interviewer(
    payload: dict[str, Any] = Body(...),
    remote: RemoteStateClient = Depends(get_remote_client),
) -> JSONResponse:
    remote.save_interviewer(payload)
    return ok_response(updated=True)


@app.post("/api/decisions")
def record_decision(
    payload: DecisionRequest,
    remote: RemoteStateClient = Depends(get_remote_client),
) -> JSONResponse:
    """Append a hiring decision and sync it onto the applicant's status."""
    require_fields(payload, "applicant_id", "decision", "decided_by")
    decision = Decision(
        applicant_id=payload.applicant_id or "",
        decision=payload.decision or "",
        decided_by=payload.decided_by or "",
        memo=payload.memo or "",
    )
    remote.save_decision(decision)
    remote.update_applicant_status(
        ApplicantStatusUpdate(
            applicant_id=decision.applicant_id,
            status=DECISION_STATUS.get(decision.decision, decision.decision),
        )
    )
    return ok_response(updated=True)
