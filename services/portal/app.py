"""Invoice portal application root.

Owns the invoice store and the extraction provider, and exposes the
operations the presentation layer drives: login, role-scoped reads, the
treasury actions and supplier uploads. Each operation checks the acting
user's capability at entry.
"""

import logging
from collections.abc import Callable
from datetime import date

from services.extraction.base import ExtractionProvider
from services.extraction.factory import create_extraction_provider
from services.invoices import aggregation, lifecycle
from services.invoices.access import Permission, allowed_views, home_view, require_permission
from services.invoices.models import Invoice, Supplier, User, UserRole, View
from services.invoices.seed import PortalState, default_state
from services.invoices.store import InvoiceStore
from services.portal.uploads import UploadSlot
from services.shared import metrics
from services.shared.config import Settings, get_settings
from services.shared.logging_config import configure_logging

logger = logging.getLogger(__name__)

ADMIN_USER_ID = "A-1"
ADMIN_NAME = "Tesorero Huerta"
ADMIN_EMAIL = "admin@huerta.com"
SUPPLIER_EMAIL = "externo@huerta.com"


class Portal:
    """Single-tenant invoice portal."""

    def __init__(
        self,
        settings: Settings,
        provider: ExtractionProvider,
        state: PortalState | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        """Initialize portal.

        Args:
            settings: Application settings
            provider: Extraction collaborator used for uploads
            state: Initial suppliers and invoices; defaults to the Huerta seed data
            clock: Source of "today" for upload and payment dates
        """
        self.settings = settings
        self.provider = provider
        self.store = InvoiceStore(state if state is not None else default_state())
        self._clock = clock
        self._slots: dict[str, UploadSlot] = {}
        self._refresh_debt_gauge()

    # Session

    def login(self, role: UserRole, supplier_id: str | None = None) -> User:
        """Self-selected login; no credentials are checked.

        Raises:
            NotFound: If a supplier login names an unknown supplier
        """
        if role == UserRole.ADMIN:
            user = User(id=ADMIN_USER_ID, name=ADMIN_NAME, email=ADMIN_EMAIL, role=role)
        else:
            supplier = self.store.get_supplier(supplier_id or "")
            user = User(
                id=f"S-{supplier.id}",
                name=supplier.name,
                email=SUPPLIER_EMAIL,
                role=role,
                supplier_id=supplier.id,
            )
        logger.info(f"User {user.id} logged in as {role.value}")
        return user

    def home_view(self, user: User | None) -> View:
        return home_view(user.role if user else None)

    def allowed_views(self, user: User | None) -> frozenset[View]:
        return allowed_views(user.role if user else None)

    # Reads

    def invoices_for(self, user: User) -> list[Invoice]:
        """Invoices visible to ``user``, in ledger order."""
        return aggregation.visible_invoices_for(user, self.store.invoices())

    def admin_dashboard(self, user: User) -> aggregation.AdminDashboard:
        require_permission(user.role, Permission.VIEW_DASHBOARD)
        return aggregation.admin_dashboard(self.store.suppliers(), self.store.invoices())

    def supplier_statement(self, user: User) -> aggregation.SupplierStatement:
        require_permission(user.role, Permission.VIEW_OWN_INVOICES)
        return aggregation.supplier_statement(user, self.store.invoices())

    def supplier_directory(self, user: User) -> list[Supplier]:
        require_permission(user.role, Permission.VIEW_SUPPLIERS)
        return list(self.store.suppliers())

    def supplier_name(self, supplier_id: str) -> str | None:
        """Display name for a supplier, or None for an orphaned reference."""
        if not self.store.has_supplier(supplier_id):
            return None
        return self.store.get_supplier(supplier_id).name

    def balance_drift(self) -> list[aggregation.BalanceDrift]:
        """Report suppliers whose stored balance disagrees with the ledger."""
        drifts = aggregation.balance_drift(self.store.suppliers(), self.store.invoices())
        for drift in drifts:
            logger.warning(
                f"Supplier {drift.supplier_id} stored balance {drift.stored_balance} "
                f"differs from ledger outstanding {drift.ledger_outstanding}"
            )
        return drifts

    # Treasury actions

    def approve(self, user: User, invoice_id: str) -> Invoice:
        """Schedule a pending invoice for payment."""
        return self._transition(user, invoice_id, lifecycle.approve)

    def settle(self, user: User, invoice_id: str) -> Invoice:
        """Mark a scheduled invoice as paid."""
        return self._transition(user, invoice_id, lifecycle.settle)

    # Uploads

    def upload_slot(self, user: User) -> UploadSlot:
        """The user's upload slot, created on first use.

        Raises:
            Forbidden: If the user may not upload
            NotFound: If the user's supplier is unknown
        """
        require_permission(user.role, Permission.UPLOAD_INVOICE)
        supplier = self.store.get_supplier(user.supplier_id or "")
        slot = self._slots.get(supplier.id)
        if slot is None:
            slot = UploadSlot(supplier.id, self.store, self.provider, self.settings, self._clock)
            self._slots[supplier.id] = slot
        return slot

    def is_processing(self, user: User) -> bool:
        """Whether the user's upload is waiting on extraction."""
        slot = self._slots.get(user.supplier_id or "")
        return slot is not None and slot.processing

    async def upload(self, user: User, document: bytes) -> Invoice:
        """Extract and register an invoice for the uploading supplier.

        Raises:
            Forbidden: If the user may not upload
            UploadInProgress: If the user's previous upload is still processing
            ExtractionFailure: If no invoice could be extracted
        """
        invoice = await self.upload_slot(user).submit(document)
        self._refresh_debt_gauge()
        return invoice

    async def aclose(self) -> None:
        await self.provider.aclose()

    def _transition(
        self,
        user: User,
        invoice_id: str,
        action: Callable[..., Invoice],
    ) -> Invoice:
        invoice = action(
            self.store,
            invoice_id,
            user.role,
            today=self._clock(),
            payment_lead_days=self.settings.payment_lead_days,
        )
        self._refresh_debt_gauge()
        return invoice

    def _refresh_debt_gauge(self) -> None:
        metrics.outstanding_debt.set(float(aggregation.total_outstanding(self.store.invoices())))


def create_portal(
    settings: Settings | None = None,
    state: PortalState | None = None,
    provider: ExtractionProvider | None = None,
) -> Portal:
    """Build a portal from configuration.

    Configures logging, creates the configured extraction provider unless one
    is given, and logs any supplier balance drift found in the initial state.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    portal = Portal(settings, provider or create_extraction_provider(settings), state=state)
    portal.balance_drift()
    logger.info(f"{settings.service_name} {settings.service_version} ready")
    return portal
