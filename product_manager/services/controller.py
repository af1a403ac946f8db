# product_manager/services/controller.py

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from product_manager.repositories.product_repo import ProductStore
from product_manager.schemas.content_schema import ContentAnalysis, MarketingCopy
from product_manager.schemas.product_schema import Product, ProductDraft
from product_manager.services.content_service import AIGenerationError, ContentService
from product_manager.services.form_service import (
    ValidationError,
    build_product,
    merge_draft,
    require_description_inputs,
)
from product_manager.utils.logs import get_logger

log = get_logger("controller", "CONTROLLER")


class View(str, enum.Enum):
    LIST = "list"
    DETAIL = "detail"


class CommandType(str, enum.Enum):
    SELECT = "select"
    BACK = "back"
    OPEN_FORM = "open_form"
    CLOSE_FORM = "close_form"
    UPDATE_DRAFT = "update_draft"
    SAVE = "save"
    REQUEST_DELETE = "request_delete"
    CONFIRM_DELETE = "confirm_delete"
    CANCEL_DELETE = "cancel_delete"
    GENERATE_DESCRIPTION = "generate_description"
    GENERATE_MARKETING_COPY = "generate_marketing_copy"
    ANALYZE_CONTENT = "analyze_content"


class CommandError(Exception):
    """The command can't apply to the current state or its payload is malformed."""
    pass


@dataclass(frozen=True)
class Command:
    type: CommandType
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FormState:
    is_open: bool = False
    editing: Optional[Product] = None
    draft: ProductDraft = field(default_factory=ProductDraft)
    errors: Dict[str, str] = field(default_factory=dict)
    generating_description: bool = False
    token: int = 0


@dataclass(frozen=True)
class DetailSession:
    """Ephemeral AI results for one visit to a product's detail view."""

    product_id: str
    token: int
    marketing_copy: Optional[MarketingCopy] = None
    analysis: Optional[ContentAnalysis] = None
    generating_copy: bool = False
    analyzing: bool = False
    copy_error: Optional[str] = None
    analysis_error: Optional[str] = None


@dataclass(frozen=True)
class ViewState:
    view: View = View.LIST
    selected_product_id: Optional[str] = None
    form: FormState = field(default_factory=FormState)
    pending_delete_id: Optional[str] = None
    detail: Optional[DetailSession] = None
    # source of session tokens; bumped whenever a detail view or form opens
    counter: int = 0


# --- pure transitions ---------------------------------------------------


def select(state: ViewState, product_id: str) -> ViewState:
    token = state.counter + 1
    return replace(
        state,
        view=View.DETAIL,
        selected_product_id=product_id,
        detail=DetailSession(product_id=product_id, token=token),
        counter=token,
    )


def back(state: ViewState) -> ViewState:
    return replace(state, view=View.LIST, selected_product_id=None, detail=None)


def open_form(state: ViewState, product: Optional[Product] = None) -> ViewState:
    token = state.counter + 1
    draft = ProductDraft.from_product(product) if product else ProductDraft()
    return replace(
        state,
        form=FormState(is_open=True, editing=product, draft=draft, token=token),
        counter=token,
    )


def close_form(state: ViewState) -> ViewState:
    return replace(state, form=FormState())


def set_draft(state: ViewState, draft: ProductDraft) -> ViewState:
    return replace(state, form=replace(state.form, draft=draft, errors={}))


def form_invalid(state: ViewState, errors: Dict[str, str]) -> ViewState:
    return replace(state, form=replace(state.form, errors=dict(errors)))


def update_form(state: ViewState, token: int, **changes) -> ViewState:
    """Apply changes to the form only if it is still the one identified by ``token``."""
    if not state.form.is_open or state.form.token != token:
        return state
    return replace(state, form=replace(state.form, **changes))


def request_delete(state: ViewState, product_id: str) -> ViewState:
    return replace(state, pending_delete_id=product_id)


def cancel_delete(state: ViewState) -> ViewState:
    return replace(state, pending_delete_id=None)


def after_delete(state: ViewState, product_id: str) -> ViewState:
    state = cancel_delete(state)
    if state.selected_product_id == product_id:
        state = back(state)
    return state


def update_detail(state: ViewState, token: int, **changes) -> ViewState:
    """Apply changes to the detail session only if it is still the one identified by ``token``."""
    if state.detail is None or state.detail.token != token:
        return state
    return replace(state, detail=replace(state.detail, **changes))


def is_current_detail(state: ViewState, token: int) -> bool:
    return state.detail is not None and state.detail.token == token


# --- controller ---------------------------------------------------------


def _require_id(payload: Dict[str, Any]) -> str:
    product_id = payload.get("id")
    if not product_id or not isinstance(product_id, str):
        raise CommandError("payload.id is required")
    return product_id


class AppController:
    """
    Owns the view state and wires commands to the product store and the
    content service. ``dispatch`` is the top-level action handler: form
    validation and AI failures end up in the state, never raised past it.
    """

    def __init__(self, store: ProductStore, content: ContentService):
        self.store = store
        self.content = content
        self.state = ViewState()
        self._handlers = {
            CommandType.SELECT: self._select,
            CommandType.BACK: self._back,
            CommandType.OPEN_FORM: self._open_form,
            CommandType.CLOSE_FORM: self._close_form,
            CommandType.UPDATE_DRAFT: self._update_draft,
            CommandType.SAVE: self._save,
            CommandType.REQUEST_DELETE: self._request_delete,
            CommandType.CONFIRM_DELETE: self._confirm_delete,
            CommandType.CANCEL_DELETE: self._cancel_delete,
            CommandType.GENERATE_DESCRIPTION: self._generate_description,
            CommandType.GENERATE_MARKETING_COPY: self._generate_marketing_copy,
            CommandType.ANALYZE_CONTENT: self._analyze_content,
        }

    @property
    def selected_product(self) -> Optional[Product]:
        if self.state.view != View.DETAIL:
            return None
        return self.store.get(self.state.selected_product_id)

    async def dispatch(self, command: Command) -> ViewState:
        handler = self._handlers[command.type]
        try:
            await handler(command.payload or {})
        except ValidationError as e:
            log.info("%s rejected: %s", command.type.value, e)
            self.state = form_invalid(self.state, e.errors)
        return self.state

    async def _select(self, payload):
        self.state = select(self.state, _require_id(payload))

    async def _back(self, payload):
        self.state = back(self.state)

    async def _open_form(self, payload):
        product = None
        if payload.get("id"):
            product = self.store.get(payload["id"])
            if product is None:
                raise CommandError(f"Unknown product {payload['id']}")
        self.state = open_form(self.state, product)

    async def _close_form(self, payload):
        self.state = close_form(self.state)

    def _require_open_form(self) -> FormState:
        if not self.state.form.is_open:
            raise CommandError("The product form is not open")
        return self.state.form

    async def _update_draft(self, payload):
        form = self._require_open_form()
        self.state = set_draft(self.state, merge_draft(form.draft, payload))

    async def _save(self, payload):
        form = self._require_open_form()
        draft = merge_draft(form.draft, payload) if payload else form.draft
        self.state = set_draft(self.state, draft)
        product = build_product(draft, form.editing)
        self.store.put(product)
        log.info("Saved product %s (%s).", product.id, "edit" if form.editing else "new")
        self.state = close_form(self.state)

    async def _request_delete(self, payload):
        self.state = request_delete(self.state, _require_id(payload))

    async def _confirm_delete(self, payload):
        product_id = self.state.pending_delete_id
        if not product_id:
            raise CommandError("No delete awaiting confirmation")
        if self.store.delete(product_id):
            log.info("Deleted product %s.", product_id)
        self.state = after_delete(self.state, product_id)

    async def _cancel_delete(self, payload):
        self.state = cancel_delete(self.state)

    async def _generate_description(self, payload):
        form = self._require_open_form()
        require_description_inputs(form.draft)
        token = form.token
        self.state = update_form(self.state, token, generating_description=True)
        text = await self.content.generate_description(form.draft.name, form.draft.category)
        current = self.state.form
        if not current.is_open or current.token != token:
            log.debug("Discarding description for a closed form.")
            return
        draft = current.draft.model_copy(update={"description": text})
        self.state = update_form(self.state, token, draft=draft, generating_description=False)

    def _require_detail(self):
        product = self.selected_product
        if product is None or self.state.detail is None:
            raise CommandError("No product selected")
        return product, self.state.detail.token

    async def _generate_marketing_copy(self, payload):
        product, token = self._require_detail()
        self.state = update_detail(self.state, token, generating_copy=True, marketing_copy=None, copy_error=None)
        try:
            copy = await self.content.generate_marketing_copy(product)
        except AIGenerationError as e:
            self.state = update_detail(self.state, token, copy_error=str(e))
            return
        finally:
            self.state = update_detail(self.state, token, generating_copy=False)
        if not is_current_detail(self.state, token):
            log.debug("Discarding marketing copy for %s: detail view left.", product.id)
            return
        self.state = update_detail(self.state, token, marketing_copy=copy)

    async def _analyze_content(self, payload):
        product, token = self._require_detail()
        self.state = update_detail(self.state, token, analyzing=True, analysis=None, analysis_error=None)
        try:
            analysis = await self.content.analyze_content(product.description)
        except AIGenerationError as e:
            self.state = update_detail(self.state, token, analysis_error=str(e))
            return
        finally:
            self.state = update_detail(self.state, token, analyzing=False)
        if not is_current_detail(self.state, token):
            log.debug("Discarding analysis for %s: detail view left.", product.id)
            return
        self.state = update_detail(self.state, token, analysis=analysis)

    def render(self) -> Dict[str, Any]:
        """View model for the presentation layer."""
        state = self.state
        product = self.selected_product
        detail = None
        # a stale selection renders no detail at all
        if product is not None and state.detail is not None:
            d = state.detail
            detail = {
                "marketingCopy": d.marketing_copy.model_dump(by_alias=True) if d.marketing_copy else None,
                "analysis": d.analysis.model_dump(by_alias=True) if d.analysis else None,
                "generatingCopy": d.generating_copy,
                "analyzing": d.analyzing,
                "copyError": d.copy_error,
                "analysisError": d.analysis_error,
            }
        form = state.form
        return {
            "view": state.view.value,
            "selectedProductId": state.selected_product_id,
            "selectedProduct": product.to_view() if product else None,
            "detail": detail,
            "products": [p.to_view() for p in self.store.products],
            "form": {
                "open": form.is_open,
                "editingId": form.editing.id if form.editing else None,
                "draft": form.draft.model_dump(mode="json", by_alias=True),
                "errors": dict(form.errors),
                "generatingDescription": form.generating_description,
            },
            "pendingDeleteId": state.pending_delete_id,
        }
