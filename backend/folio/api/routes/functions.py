"""
Edge functions: stateless JSON handlers over third-party APIs

Mounted at /functions/v1/<name>. Failures are answered as {error} bodies
(plus success: false where the function reports it) with the mapped status.
"""
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import (HTMLResponse, JSONResponse, RedirectResponse,
                               Response, StreamingResponse)
from sqlalchemy.orm import Session

from folio.core.ai_gateway import AIGateway, ProviderConfig, get_ai_gateway
from folio.core.auth import require_admin
from folio.core.database import get_db
from folio.core.errors import FolioError, FunctionError, ValidationError
from folio.core.logging_config import LoggingConfig
from folio.core.metrics import record_function_outcome
from folio.services import sitemap
from folio.services.ai_agent import AgentRequest, AIAgent
from folio.services.airtable_migration import AirtableMigration
from folio.services.autopilot import AutopilotService
from folio.services.firecrawl import FirecrawlClient
from folio.services.module_service import ModuleService
from folio.services.newsletter_service import NewsletterSender
from folio.services.og_blog import CACHE_CONTROL, blog_index_url, render_og_page
from folio.services.page_builder_chat import PageBuilderChat
from folio.services.signal_ingest import SignalIngestService
from folio.services.text_enhancer import TextEnhancer
from folio.services.unsplash import UnsplashClient

router = APIRouter(prefix="/functions/v1", tags=["functions"])
logger = LoggingConfig.get_logger(__name__)


def get_outbound_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for third-party calls; None uses the network (tests override it)"""
    return None


async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


async def _invoke(function: str, handler: Callable[[], Awaitable[Any]]) -> Response:
    """Run a function handler, mapping errors to JSON bodies and counting the outcome"""
    try:
        result = await handler()
    except FolioError as e:
        record_function_outcome(function, e.status_code)
        logger.warning(f"{function} failed [{e.status_code}]: {e.message}")
        return JSONResponse(e.to_body(), status_code=e.status_code)
    except Exception as e:
        record_function_outcome(function, 500)
        logger.error(f"{function} failed: {e}", exc_info=True)
        return JSONResponse({"error": str(e) or "Unknown error"}, status_code=500)

    if isinstance(result, Response):
        record_function_outcome(function, result.status_code)
        return result
    record_function_outcome(function, 200)
    return JSONResponse(result)


@router.post("/enhance-text", dependencies=[Depends(require_admin)])
async def enhance_text(request: Request, gateway: AIGateway = Depends(get_ai_gateway)):
    """Correct, enhance or expand copy: {text, action, context?} -> {text, action}"""
    async def handler():
        body = await _json_body(request)
        return await TextEnhancer(gateway).enhance_text(body.get("text"), body.get("action"), body.get("context"))

    return await _invoke("enhance-text", handler)


@router.post("/enhance-prompt", dependencies=[Depends(require_admin)])
async def enhance_prompt(
    request: Request,
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    async def handler():
        body = await _json_body(request)
        ai_config = ModuleService(db).get_config("ai")
        return await TextEnhancer(gateway).enhance_prompt(body.get("text"), body.get("action"), ai_config)

    return await _invoke("enhance-prompt", handler)


@router.post("/page-builder-chat", dependencies=[Depends(require_admin)])
async def page_builder_chat(
    request: Request,
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """SSE passthrough of the admin model's answer"""
    async def handler():
        body = await _json_body(request)
        messages = body.get("messages")
        if not isinstance(messages, list):
            raise ValidationError("messages must be a list")
        chat = PageBuilderChat(gateway, db)
        stream = await chat.stream(messages, body.get("currentBlocks"), ModuleService(db).get_config("ai"))
        return StreamingResponse(
            stream,
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    return await _invoke("page-builder-chat", handler)


@router.post("/ai-chat")
async def ai_chat(
    request: Request,
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """One agent turn: {messages, sessionId, systemPrompt, siteContext, integration, enabledTools}"""
    async def handler():
        body = await _json_body(request)
        integration = body.get("integration") or {}
        if not isinstance(integration, dict) or not integration.get("type"):
            raise FunctionError("Integration type is required", 500)

        provider = ProviderConfig(
            provider=integration["type"],
            model=integration.get("model") or gateway.settings.chat_default_model,
            webhook_url=integration.get("webhook_url"),
        )
        logger.info(
            "AI chat request",
            extra={
                "provider": provider.provider,
                "messages": len(body.get("messages") or []),
                "has_context": bool(body.get("siteContext")),
            },
        )
        result = await AIAgent(gateway, db=db).run(AgentRequest(
            messages=body.get("messages") or [],
            session_id=body.get("sessionId"),
            system_prompt=body.get("systemPrompt") or "",
            site_context=body.get("siteContext"),
            enabled_tools=body.get("enabledTools"),
            provider=provider,
        ))
        response: Dict[str, Any] = {"output": result.output}
        if result.artifacts:
            response["artifacts"] = [artifact.model_dump() for artifact in result.artifacts]
        return response

    return await _invoke("ai-chat", handler)


@router.post("/send-newsletter", dependencies=[Depends(require_admin)])
async def send_newsletter(
    request: Request,
    db: Session = Depends(get_db),
    transport=Depends(get_outbound_transport),
):
    async def handler():
        body = await _json_body(request)
        return await NewsletterSender(db, transport=transport).send(body.get("campaignId"))

    return await _invoke("send-newsletter", handler)


@router.api_route("/signal-ingest", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def signal_ingest(request: Request, db: Session = Depends(get_db)):
    """Browser-extension capture: bearer token checked against the api_tokens module"""
    async def handler():
        if request.method != "POST":
            raise FunctionError("Method not allowed", 405)
        service = SignalIngestService(db)
        # Token is checked before the body is parsed
        service.authenticate(request.headers.get("authorization"))
        task = service.store(await _json_body(request))
        return {"ok": True, "id": str(task.id)}

    return await _invoke("signal-ingest", handler)


@router.post("/unsplash-search", dependencies=[Depends(require_admin)])
async def unsplash_search(request: Request, transport=Depends(get_outbound_transport)):
    async def handler():
        body = await _json_body(request)
        return await UnsplashClient(transport=transport).search(
            body.get("query"),
            page=int(body.get("page") or 1),
            per_page=int(body.get("per_page") or 12),
        )

    return await _invoke("unsplash-search", handler)


@router.post("/migrate-airtable-projects", dependencies=[Depends(require_admin)])
async def migrate_airtable_projects(
    request: Request,
    db: Session = Depends(get_db),
    transport=Depends(get_outbound_transport),
):
    async def handler():
        body = await _json_body(request)
        return await AirtableMigration(db, transport=transport).run(
            body.get("airtableApiKey"),
            body.get("airtableBaseId"),
            body.get("airtableTableId"),
        )

    return await _invoke("migrate-airtable-projects", handler)


@router.get("/og-blog")
async def og_blog(slug: Optional[str] = None, db: Session = Depends(get_db)):
    """Crawler-facing blog page with Open Graph meta; no slug redirects to the blog index"""
    async def handler():
        if not slug:
            return RedirectResponse(blog_index_url(), status_code=302)
        return HTMLResponse(render_og_page(db, slug), headers={"Cache-Control": CACHE_CONTROL})

    return await _invoke("og-blog", handler)


@router.get("/sitemap-dynamic")
async def sitemap_dynamic(db: Session = Depends(get_db)):
    """XML sitemap of enabled pages and published posts"""
    async def handler():
        return Response(
            sitemap.render_sitemap(db),
            media_type="application/xml",
            headers={"Cache-Control": sitemap.CACHE_CONTROL},
        )

    return await _invoke("sitemap-dynamic", handler)


@router.post("/agent-autopilot", dependencies=[Depends(require_admin)])
async def agent_autopilot(
    request: Request,
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_ai_gateway),
    transport=Depends(get_outbound_transport),
):
    async def handler():
        try:
            body = await _json_body(request)
        except ValidationError as e:
            raise FunctionError(e.message, 500, include_success=True)
        firecrawl = FirecrawlClient(gateway.settings, transport=transport)
        return await AutopilotService(db, gateway, firecrawl).run(body)

    return await _invoke("agent-autopilot", handler)
