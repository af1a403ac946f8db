import asyncio
import json
from datetime import datetime, timezone

import pytest

from product_manager.adapters.mock_text import MockTextAdapter
from product_manager.repositories.product_repo import ProductStore
from product_manager.schemas.product_schema import ProductDraft, ProductStatus
from product_manager.services.content_service import DESCRIPTION_FALLBACK, ContentService
from product_manager.services.controller import (
    AppController,
    Command,
    CommandError,
    CommandType,
    View,
    ViewState,
    back,
    close_form,
    open_form,
    select,
    update_detail,
)
from product_manager.services.form_service import ValidationError, build_product


def run(controller, type_, **payload):
    return asyncio.run(controller.dispatch(Command(CommandType(type_), payload)))


def _controller(adapter):
    store = ProductStore()
    store.load()
    return AppController(store, ContentService(adapter, timeout_seconds=1))


# --- pure transitions ---


def test_select_and_back_transitions():
    s = select(ViewState(), "prod_1")
    assert s.view == View.DETAIL
    assert s.selected_product_id == "prod_1"
    assert s.detail.product_id == "prod_1"

    s = back(s)
    assert s.view == View.LIST
    assert s.selected_product_id is None
    assert s.detail is None


def test_each_selection_starts_a_new_detail_session():
    s1 = select(ViewState(), "prod_1")
    s2 = select(back(s1), "prod_1")
    assert s2.detail.token != s1.detail.token
    # a result for the old session is ignored
    assert update_detail(s2, s1.detail.token, copy_error="late") == s2


def test_open_and_close_form():
    s = open_form(ViewState())
    assert s.form.is_open and s.form.editing is None
    assert s.form.draft == ProductDraft()
    s = close_form(s)
    assert not s.form.is_open and s.form.editing is None


# --- saving ---


def test_new_product_scenario(controller):
    before = datetime.now(timezone.utc)
    run(controller, "open_form")
    state = run(controller, "save", name="Widget", category="Tool", price=9.99)
    after = datetime.now(timezone.utc)

    assert not state.form.is_open
    first = controller.store.products[0]
    assert first.name == "Widget"
    assert first.id and first.id not in ("prod_1", "prod_2", "prod_3")
    assert first.status == ProductStatus.DRAFT
    assert first.price == 9.99
    assert before <= first.created_at <= after
    assert len(controller.store.products) == 4


def test_edit_keeps_id_created_at_and_order(controller):
    original_order = [p.id for p in controller.store.products]
    target = controller.store.get("prod_2")

    run(controller, "open_form", id="prod_2")
    assert controller.state.form.draft.name == target.name
    run(controller, "save", name="Renamed Course", status="Archived")

    edited = controller.store.get("prod_2")
    assert edited.name == "Renamed Course"
    assert edited.status == ProductStatus.ARCHIVED
    assert edited.created_at == target.created_at
    assert [p.id for p in controller.store.products] == original_order


def test_created_at_never_changes_across_edits(controller):
    run(controller, "open_form")
    run(controller, "save", name="Widget", category="Tool")
    product = controller.store.products[0]

    for i in range(3):
        run(controller, "open_form", id=product.id)
        run(controller, "save", price=float(i + 1))
        assert controller.store.get(product.id).created_at == product.created_at


def test_save_missing_fields_keeps_form_open(controller):
    run(controller, "open_form")
    state = run(controller, "save", name="Widget", category="  ")
    assert state.form.is_open
    assert "category" in state.form.errors
    assert state.form.draft.name == "Widget"
    assert len(controller.store.products) == 3


def test_invalid_draft_value_reports_field_error(controller):
    run(controller, "open_form")
    run(controller, "update_draft", name="Widget")
    state = run(controller, "update_draft", price="not a number")
    assert "price" in state.form.errors
    assert state.form.draft.name == "Widget"
    assert state.form.draft.price == 0


@pytest.mark.parametrize("price", ["inf", "-inf", "nan", float("inf")])
def test_non_finite_price_is_rejected(controller, price):
    run(controller, "open_form")
    state = run(controller, "save", name="Widget", category="Tool", price=price)
    assert state.form.is_open
    assert "price" in state.form.errors
    assert len(controller.store.products) == 3
    assert all(p.name != "Widget" for p in controller.store.products)


def test_build_product_rejects_non_finite_price():
    draft = ProductDraft.model_construct(name="Widget", category="Tool", price=float("nan"))
    with pytest.raises(ValidationError) as exc:
        build_product(draft)
    assert "price" in exc.value.errors


def test_save_without_open_form_is_rejected(controller):
    with pytest.raises(CommandError):
        run(controller, "save", name="x", category="y")


def test_open_form_for_unknown_product_is_rejected(controller):
    with pytest.raises(CommandError):
        run(controller, "open_form", id="missing")


# --- deleting ---


def test_delete_requires_confirmation(controller):
    run(controller, "request_delete", id="prod_1")
    assert controller.state.pending_delete_id == "prod_1"
    run(controller, "cancel_delete")
    assert controller.state.pending_delete_id is None
    assert controller.store.get("prod_1") is not None

    run(controller, "request_delete", id="prod_1")
    run(controller, "confirm_delete")
    assert controller.store.get("prod_1") is None
    assert len(controller.store.products) == 2


def test_confirm_without_request_is_rejected(controller):
    with pytest.raises(CommandError):
        run(controller, "confirm_delete")


def test_deleting_unknown_id_is_noop(controller):
    before = list(controller.store.products)
    run(controller, "request_delete", id="ghost")
    run(controller, "confirm_delete")
    assert controller.store.products == before


def test_deleting_selected_product_returns_to_list(controller):
    run(controller, "select", id="prod_3")
    run(controller, "request_delete", id="prod_3")
    state = run(controller, "confirm_delete")
    assert state.view == View.LIST
    assert state.selected_product_id is None


# --- detail view ---


def test_stale_selection_renders_no_detail(controller):
    run(controller, "select", id="gone")
    assert controller.selected_product is None
    view = controller.render()
    assert view["selectedProduct"] is None
    assert view["detail"] is None
    with pytest.raises(CommandError):
        run(controller, "generate_marketing_copy")


def test_generate_marketing_copy_fills_slot(controller):
    run(controller, "select", id="prod_1")
    state = run(controller, "generate_marketing_copy")
    assert state.detail.marketing_copy.ad_headline
    assert not state.detail.generating_copy
    assert controller.render()["detail"]["marketingCopy"]["adHeadline"]


def test_marketing_copy_failure_becomes_notice():
    controller = _controller(MockTextAdapter(json_responses={"marketing_copy": "{oops"}))
    run(controller, "select", id="prod_1")
    state = run(controller, "generate_marketing_copy")
    assert state.detail.marketing_copy is None
    assert "marketing copy" in state.detail.copy_error
    assert not state.detail.generating_copy


def test_analysis_failure_becomes_notice():
    controller = _controller(MockTextAdapter(force_failure=True))
    run(controller, "select", id="prod_1")
    state = run(controller, "analyze_content")
    assert state.detail.analysis is None
    assert state.detail.analysis_error


class CrashingAdapter(MockTextAdapter):
    async def generate_json(self, prompt, **kwargs):
        raise RuntimeError("connection reset")


def test_unexpected_adapter_error_becomes_notice():
    controller = _controller(CrashingAdapter())
    run(controller, "select", id="prod_1")
    state = run(controller, "generate_marketing_copy")
    assert state.detail.copy_error
    assert not state.detail.generating_copy
    state = run(controller, "analyze_content")
    assert state.detail.analysis_error
    assert not state.detail.analyzing


def test_copy_and_analysis_run_concurrently():
    controller = _controller(MockTextAdapter(delay_ms=50))
    run(controller, "select", id="prod_2")

    async def both():
        await asyncio.gather(
            controller.dispatch(Command(CommandType.GENERATE_MARKETING_COPY)),
            controller.dispatch(Command(CommandType.ANALYZE_CONTENT)),
        )

    asyncio.run(both())
    detail = controller.state.detail
    assert detail.marketing_copy is not None
    assert detail.analysis is not None


def test_response_after_leaving_detail_is_discarded():
    controller = _controller(MockTextAdapter(delay_ms=50))
    run(controller, "select", id="prod_1")

    async def leave_then_come_back():
        task = asyncio.create_task(controller.dispatch(Command(CommandType.GENERATE_MARKETING_COPY)))
        await asyncio.sleep(0.01)
        await controller.dispatch(Command(CommandType.BACK))
        await controller.dispatch(Command(CommandType.SELECT, {"id": "prod_1"}))
        await task

    asyncio.run(leave_then_come_back())
    assert controller.state.detail.marketing_copy is None
    assert not controller.state.detail.generating_copy


# --- description generation ---


def test_generate_description_fills_draft(controller):
    run(controller, "open_form")
    run(controller, "update_draft", name="Widget", category="Tool")
    state = run(controller, "generate_description")
    assert state.form.draft.description
    assert state.form.draft.description != DESCRIPTION_FALLBACK
    assert not state.form.generating_description


def test_generate_description_requires_name_and_category(controller):
    run(controller, "open_form")
    run(controller, "update_draft", name="Widget")
    state = run(controller, "generate_description")
    assert "category" in state.form.errors
    assert state.form.draft.description == ""


def test_generate_description_failure_uses_fallback():
    controller = _controller(MockTextAdapter(force_failure=True))
    run(controller, "open_form")
    run(controller, "update_draft", name="Widget", category="Tool")
    state = run(controller, "generate_description")
    assert state.form.draft.description == DESCRIPTION_FALLBACK


def test_description_for_closed_form_is_discarded():
    controller = _controller(MockTextAdapter(delay_ms=50))
    run(controller, "open_form")
    run(controller, "update_draft", name="Widget", category="Tool")

    async def close_midway():
        task = asyncio.create_task(controller.dispatch(Command(CommandType.GENERATE_DESCRIPTION)))
        await asyncio.sleep(0.01)
        await controller.dispatch(Command(CommandType.CLOSE_FORM))
        await controller.dispatch(Command(CommandType.OPEN_FORM))
        await task

    asyncio.run(close_midway())
    assert controller.state.form.is_open
    assert controller.state.form.draft.description == ""


def test_render_lists_products_newest_first(controller):
    view = controller.render()
    assert view["view"] == "list"
    assert [p["id"] for p in view["products"]] == ["prod_3", "prod_2", "prod_1"]
    assert json.dumps(view)  # view model is JSON-serializable
