"""ActionHandlers: per-action writes, skips and failures with mocked repositories."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from app.application.dtos.automation import parse_action
from app.core.config import Settings
from app.domain.enums import EntityType, RecipientType
from app.domain.exceptions import ActionExecutionException
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.lead import Lead
from app.infrastructure.services.action_handlers import (
    ActionContext,
    ActionHandlers,
    Recipient,
)
from app.infrastructure.services.template_renderer import TemplateRenderer


def _with_id(new_id: str):
    def _assign(row):
        row.id = new_id
        return row

    return _assign


def _handlers(settings: Settings | None = None, http_client=None) -> ActionHandlers:
    repos = {
        name: AsyncMock()
        for name in (
            "notification_repo",
            "email_repo",
            "sms_repo",
            "task_repo",
            "user_repo",
            "student_repo",
            "campaign_repo",
            "enrollment_repo",
            "entity_repo",
        )
    }
    repos["notification_repo"].create.side_effect = _with_id("ntf_1")
    repos["email_repo"].create.side_effect = _with_id("eml_1")
    repos["sms_repo"].create.side_effect = _with_id("sms_1")
    repos["task_repo"].create.side_effect = _with_id("task_1")
    repos["enrollment_repo"].create.side_effect = _with_id("enr_1")
    return ActionHandlers(
        settings=settings or Settings(database_url="postgresql+asyncpg://x@localhost/test"),
        renderer=TemplateRenderer(),
        http_client=http_client,
        **repos,
    )


def _lead() -> Lead:
    return Lead(
        id="lead_1",
        agency_id="agency_1",
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        phone=None,
        status="NEW",
    )


def _ctx(entity=None, ref=None, recipient=None, data=None) -> ActionContext:
    return ActionContext(
        agency_id="agency_1",
        trigger_id="trg_1",
        entity_ref=ref,
        entity=entity,
        data=data or {},
        recipient=recipient,
    )


def _lead_ctx(**kwargs) -> ActionContext:
    lead = _lead()
    return _ctx(
        entity=lead,
        ref=EntityRef(EntityType.LEAD, lead.id),
        recipient=Recipient(lead.id, RecipientType.LEAD, lead.email, lead.phone),
        **kwargs,
    )


async def test_resolve_recipient_for_lead() -> None:
    handlers = _handlers()
    ctx = _lead_ctx()
    recipient = await handlers.resolve_recipient(ctx)
    assert recipient == Recipient("lead_1", RecipientType.LEAD, "ada@example.com", None)


async def test_resolve_recipient_for_application_uses_student() -> None:
    handlers = _handlers()
    handlers.student_repo.get_by_id_and_agency.return_value = SimpleNamespace(
        id="stu_1", email="s@example.com", phone="+100"
    )
    ctx = _ctx(
        entity=SimpleNamespace(id="app_1", student_id="stu_1"),
        ref=EntityRef(EntityType.APPLICATION, "app_1"),
    )
    recipient = await handlers.resolve_recipient(ctx)
    assert recipient == Recipient("stu_1", RecipientType.STUDENT, "s@example.com", "+100")
    handlers.student_repo.get_by_id_and_agency.assert_awaited_once_with("stu_1", "agency_1")


async def test_resolve_recipient_without_entity_is_none() -> None:
    assert await _handlers().resolve_recipient(_ctx()) is None


async def test_send_email_renders_templates() -> None:
    handlers = _handlers()
    action = parse_action(
        {"type": "SEND_EMAIL", "subject": "Hi {{first_name}}", "body": "Status {{status}} {{unknown}}."}
    )
    result = await handlers.execute(action, _lead_ctx())
    assert result.skipped is False
    assert result.info == {"email_id": "eml_1"}
    message = handlers.email_repo.create.await_args.args[0]
    assert message.to_email == "ada@example.com"
    assert message.subject == "Hi Ada"
    assert message.body == "Status NEW ."
    assert message.data["trigger_id"] == "trg_1"
    assert message.data["entity_id"] == "lead_1"


async def test_send_sms_without_phone_is_skipped() -> None:
    handlers = _handlers()
    result = await handlers.execute(parse_action({"type": "SEND_SMS", "message": "x"}), _lead_ctx())
    assert result.skipped is True
    handlers.sms_repo.create.assert_not_awaited()


async def test_send_notification_without_recipient_is_skipped() -> None:
    handlers = _handlers()
    result = await handlers.execute(parse_action({"type": "SEND_NOTIFICATION"}), _ctx())
    assert result.skipped is True


async def test_create_task_links_lead() -> None:
    handlers = _handlers()
    action = parse_action({"type": "CREATE_TASK", "title": "Call {{first_name}}", "delay": 2})
    result = await handlers.execute(action, _lead_ctx())
    assert result.info == {"task_id": "task_1"}
    task = handlers.task_repo.create.await_args.args[0]
    assert task.title == "Call Ada"
    assert task.lead_id == "lead_1"
    assert task.student_id is None
    assert task.status == "PENDING"


async def test_create_task_with_foreign_assignee_fails() -> None:
    handlers = _handlers()
    handlers.user_repo.get_by_id_and_agency.return_value = None
    action = parse_action({"type": "CREATE_TASK", "assigned_to": "usr_other"})
    with pytest.raises(ActionExecutionException):
        await handlers.execute(action, _lead_ctx())
    handlers.task_repo.create.assert_not_awaited()


async def test_update_entity_sets_columns() -> None:
    handlers = _handlers()
    ctx = _lead_ctx()
    action = parse_action(
        {"type": "UPDATE_ENTITY", "updates": [{"field": "status", "value": "CONTACTED"}]}
    )
    result = await handlers.execute(action, ctx)
    assert result.info == {"updated_fields": ["status"]}
    assert ctx.entity.status == "CONTACTED"
    handlers.entity_repo.save.assert_awaited_once_with(ctx.entity)


@pytest.mark.parametrize("field", ["agency_id", "id", "does_not_exist"])
async def test_update_entity_rejects_protected_or_unknown_fields(field: str) -> None:
    handlers = _handlers()
    action = parse_action({"type": "UPDATE_ENTITY", "updates": [{"field": field, "value": "x"}]})
    with pytest.raises(ActionExecutionException):
        await handlers.execute(action, _lead_ctx())
    handlers.entity_repo.save.assert_not_awaited()



async def test_update_entity_leaves_row_untouched_when_a_later_field_fails() -> None:
    handlers = _handlers()
    ctx = _lead_ctx()
    action = parse_action(
        {
            "type": "UPDATE_ENTITY",
            "updates": [
                {"field": "status", "value": "CONTACTED"},
                {"field": "notes", "value": "touched"},
                {"field": "does_not_exist", "value": "x"},
            ],
        }
    )
    with pytest.raises(ActionExecutionException):
        await handlers.execute(action, ctx)
    assert ctx.entity.status == "NEW"
    assert ctx.entity.notes is None
    handlers.entity_repo.save.assert_not_awaited()

async def test_update_entity_skips_non_updatable_types() -> None:
    handlers = _handlers()
    ctx = _ctx(entity=SimpleNamespace(id="task_1"), ref=EntityRef(EntityType.TASK, "task_1"))
    action = parse_action({"type": "UPDATE_ENTITY", "updates": [{"field": "status", "value": "x"}]})
    assert (await handlers.execute(action, ctx)).skipped is True


async def test_enroll_skips_when_already_enrolled() -> None:
    handlers = _handlers()
    handlers.campaign_repo.get_by_id_and_agency.return_value = SimpleNamespace(id="cmp_1")
    handlers.enrollment_repo.find_existing.return_value = SimpleNamespace(id="enr_0")
    action = parse_action({"type": "ENROLL_IN_CAMPAIGN", "campaign_id": "cmp_1"})
    result = await handlers.execute(action, _lead_ctx())
    assert result.skipped is True
    handlers.enrollment_repo.create.assert_not_awaited()


async def test_enroll_creates_enrollment() -> None:
    handlers = _handlers()
    handlers.campaign_repo.get_by_id_and_agency.return_value = SimpleNamespace(id="cmp_1")
    handlers.enrollment_repo.find_existing.return_value = None
    action = parse_action({"type": "ENROLL_IN_CAMPAIGN", "campaign_id": "cmp_1"})
    result = await handlers.execute(action, _lead_ctx())
    assert result.info == {"enrollment_id": "enr_1"}
    enrollment = handlers.enrollment_repo.create.await_args.args[0]
    assert (enrollment.lead_id, enrollment.student_id) == ("lead_1", None)


async def test_webhook_disabled_is_skipped() -> None:
    handlers = _handlers()
    action = parse_action({"type": "WEBHOOK", "url": "https://hooks.example.com/x"})
    result = await handlers.execute(action, _lead_ctx())
    assert result.skipped is True


async def test_webhook_posts_payload_when_enabled() -> None:
    seen: list[httpx.Request] = []

    def _respond(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    settings = Settings(
        database_url="postgresql+asyncpg://x@localhost/test", webhook_actions_enabled=True
    )
    async with httpx.AsyncClient(transport=httpx.MockTransport(_respond)) as client:
        handlers = _handlers(settings, http_client=client)
        action = parse_action({"type": "WEBHOOK", "url": "https://hooks.example.com/x"})
        result = await handlers.execute(action, _lead_ctx(data={"k": "v"}))
    assert result.info == {"status_code": 202}
    assert seen[0].method == "POST"
    assert b'"trigger_id":"trg_1"' in seen[0].content.replace(b" ", b"")


async def test_webhook_error_status_raises() -> None:
    settings = Settings(
        database_url="postgresql+asyncpg://x@localhost/test", webhook_actions_enabled=True
    )
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    async with httpx.AsyncClient(transport=transport) as client:
        handlers = _handlers(settings, http_client=client)
        action = parse_action({"type": "WEBHOOK", "url": "https://hooks.example.com/x"})
        with pytest.raises(httpx.HTTPStatusError):
            await handlers.execute(action, _lead_ctx())


async def test_custom_action_is_logged_only() -> None:
    result = await _handlers().execute(
        parse_action({"type": "CUSTOM", "name": "sync_crm"}), _lead_ctx()
    )
    assert result.info == {"name": "sync_crm", "handled": False}


def test_webhook_url_must_be_http() -> None:
    with pytest.raises(ValueError):
        parse_action({"type": "WEBHOOK", "url": "ftp://example.com"})
