"""Invoice Store

Sole writer of durable invoicing state: clients, invoices and settings kept in
one whole-state document. Owns invoice numbering, lookups, search, statistics
and import/export.
"""

import json
import logging
import threading
import time
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Union
from src.app.repositories.document_storage import DocumentStorage
from src.app.services.unit_of_work import DocumentUnitOfWork
from src.app.store.dtos import AdvanceOverdueResultDTO, InvoiceStatsDTO, StatsSummaryDTO
from src.domain.base import HUNDRED, generate_uuid, round_money, utcnow
from src.domain.client import Client, ClientUpdate
from src.domain.invoice import DisplayStatus, Invoice, InvoiceStatus, advance_overdue
from src.domain.settings import Settings, SettingsUpdate
from src.domain.state_document import StateDocument

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "invoiceApp:v1"


class InvoiceStore:
    """
    Whole-document invoice repository

    Every public method is one transaction at document granularity: read the
    full state, apply the change, rewrite the full state. A per-store lock
    serializes all of them, so there is only ever one writer.

    Lookup misses are reported as None / False, never raised. Returned records
    are copies: mutating them has no effect until they are saved.

    Usage:
        store = InvoiceStore(InMemoryDocumentStorage())
        invoice = Invoice.draft(client_id=client.id)
        invoice.update_item(invoice.items[0].id, {"description": "Design", "unit_price": 500})
        saved = store.save_invoice(invoice)   # saved.id == "INV-202401-001"
    """

    def __init__(
        self,
        storage: DocumentStorage,
        storage_key: str = DEFAULT_STORAGE_KEY,
        default_settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the store

        Args:
            storage: Backend holding the serialized document
            storage_key: Key the document is stored under
            default_settings: Settings of a fresh document
            clock: Returns the current time (defaults to UTC now)
        """
        self.storage = storage
        self.storage_key = storage_key
        self.default_settings = default_settings or Settings()
        self.clock = clock or utcnow
        self._lock = threading.RLock()

        self._initialize_storage()

    def _initialize_storage(self):
        with self._lock:
            try:
                payload = self.storage.read(self.storage_key)
            except ValueError as e:
                logger.error(
                    f"Stored document '{self.storage_key}' is undecodable, "
                    f"keeping it until the next write: {e}"
                )
                return

            if payload is None:
                self.storage.write(self.storage_key, self._default_state().to_json())
                logger.info(f"Initialized empty document '{self.storage_key}'")

    def _default_state(self) -> StateDocument:
        return StateDocument(settings=self.default_settings.model_copy())

    def _unit_of_work(self) -> DocumentUnitOfWork:
        return DocumentUnitOfWork(
            self.storage,
            self.storage_key,
            self._lock,
            default_factory=self._default_state,
        )

    # ---- State ---------------------------------------------------------

    def get_state(self) -> StateDocument:
        with self._unit_of_work() as uow:
            return uow.state.model_copy(deep=True)

    # ---- Clients -------------------------------------------------------

    def get_clients(self) -> List[Client]:
        return self.get_state().clients

    def get_client(self, client_id: str) -> Optional[Client]:
        return next((c for c in self.get_clients() if c.id == client_id), None)

    def add_client(self, client: Union[Client, Dict[str, Any]]) -> Client:
        if not isinstance(client, Client):
            client = Client.model_validate(client)

        now = self.clock()
        record = client.model_copy(
            deep=True,
            update={"id": generate_uuid("c_"), "created_at": now, "updated_at": now},
        )

        with self._unit_of_work() as uow:
            uow.state.clients.append(record)
            uow.commit()

        logger.info(f"Added client {record.id}")
        return record.model_copy(deep=True)

    def update_client(
        self, client_id: str, update: Union[ClientUpdate, Dict[str, Any]]
    ) -> Optional[Client]:
        if not isinstance(update, ClientUpdate):
            update = ClientUpdate.model_validate(update)

        with self._unit_of_work() as uow:
            index = uow.state.client_index(client_id)
            if index is None:
                logger.warning(f"Client {client_id} not found for update")
                return None

            changes = update.model_dump(exclude_unset=True, exclude_none=True)
            changes["updated_at"] = self.clock()
            record = uow.state.clients[index].model_copy(update=changes)
            uow.state.clients[index] = record
            uow.commit()

        logger.info(f"Updated client {client_id}")
        return record.model_copy(deep=True)

    def delete_client(self, client_id: str) -> bool:
        """
        Delete a client

        Invoices referencing the client are neither deleted nor checked; the
        caller must refuse to delete a client that get_invoices_for_client()
        reports as referenced.
        """
        with self._unit_of_work() as uow:
            index = uow.state.client_index(client_id)
            if index is None:
                logger.warning(f"Client {client_id} not found for deletion")
                return False

            del uow.state.clients[index]
            uow.commit()

        logger.info(f"Deleted client {client_id}")
        return True

    def search_clients(self, query: str) -> List[Client]:
        clients = self.get_clients()
        if not (query or "").strip():
            return clients

        term = query.lower()
        return [
            c for c in clients
            if term in c.name.lower()
            or term in c.company.lower()
            or term in c.email.lower()
        ]

    def get_invoices_for_client(self, client_id: str) -> List[Invoice]:
        return [i for i in self.get_invoices() if i.client_id == client_id]

    # ---- Invoices ------------------------------------------------------

    def get_invoices(self) -> List[Invoice]:
        return self.get_state().invoices

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        return next((i for i in self.get_invoices() if i.id == invoice_id), None)

    def generate_invoice_number(self) -> str:
        """
        Number the next newly created invoice will receive

        Format: {prefix}-{YYYYMM}-{seed:03d} with the current year and month.
        Does not consume the seed.
        """
        with self._unit_of_work() as uow:
            return uow.state.settings.format_invoice_number(self.clock())

    def save_invoice(self, invoice: Invoice) -> Optional[Invoice]:
        """
        Create or update an invoice

        An empty id creates: a number is assigned, created_at / updated_at are
        stamped, the invoice is appended and the number seed incremented by 1.
        A set id updates the stored invoice in place, keeping its created_at.

        Args:
            invoice: Invoice to persist (not modified)

        Returns:
            Persisted invoice, or None if the id is set but unknown
        """
        now = self.clock()
        record = invoice.model_copy(deep=True)
        record.totals = record.calculate_totals()

        with self._unit_of_work() as uow:
            if record.id:
                index = uow.state.invoice_index(record.id)
                if index is None:
                    logger.warning(f"Invoice {record.id} not found for update")
                    return None

                record.created_at = uow.state.invoices[index].created_at
                record.updated_at = now
                uow.state.invoices[index] = record
                created = False
            else:
                settings = uow.state.settings
                record.id = settings.format_invoice_number(now)
                record.created_at = now
                record.updated_at = now
                uow.state.invoices.append(record)
                settings.number_seed += 1
                created = True

            uow.commit()

        logger.info(f"{'Created' if created else 'Updated'} invoice {record.id}")
        return record.model_copy(deep=True)

    def delete_invoice(self, invoice_id: str) -> bool:
        with self._unit_of_work() as uow:
            index = uow.state.invoice_index(invoice_id)
            if index is None:
                logger.warning(f"Invoice {invoice_id} not found for deletion")
                return False

            del uow.state.invoices[index]
            uow.commit()

        logger.info(f"Deleted invoice {invoice_id}")
        return True

    def duplicate_invoice(self, invoice_id: str) -> Optional[Invoice]:
        with self._lock:
            source = self.get_invoice(invoice_id)
            if source is None:
                logger.warning(f"Invoice {invoice_id} not found for duplication")
                return None

            now = self.clock()
            duplicate = self.save_invoice(source.duplicate(today=now.date(), now=now))

        logger.info(f"Duplicated invoice {invoice_id} as {duplicate.id}")
        return duplicate

    def update_invoice_status(
        self, invoice_id: str, status: Union[InvoiceStatus, str]
    ) -> Optional[Invoice]:
        status = InvoiceStatus(status)

        with self._unit_of_work() as uow:
            index = uow.state.invoice_index(invoice_id)
            if index is None:
                logger.warning(f"Invoice {invoice_id} not found for status update")
                return None

            record = uow.state.invoices[index]
            record.status = status
            record.updated_at = self.clock()
            uow.commit()

        logger.info(f"Invoice {invoice_id} status set to {status.value}")
        return record.model_copy(deep=True)

    def mark_paid(self, invoice_id: str) -> Optional[Invoice]:
        return self.update_invoice_status(invoice_id, InvoiceStatus.PAID)

    def search_invoices(self, query: str) -> List[Invoice]:
        state = self.get_state()
        if not (query or "").strip():
            return state.invoices

        term = query.lower()
        clients = {c.id: c for c in state.clients}

        def matches(invoice: Invoice) -> bool:
            client = clients.get(invoice.client_id)
            client_name = f"{client.name} {client.company}".lower() if client else ""
            return (
                term in invoice.id.lower()
                or term in client_name
                or term in invoice.notes.lower()
            )

        return [i for i in state.invoices if matches(i)]

    def get_invoices_by_status(
        self, status: Optional[Union[DisplayStatus, str]] = None
    ) -> List[Invoice]:
        """
        Filter by display status

        "unpaid" means neither paid nor overdue, so it includes due-soon
        invoices. None returns every invoice.
        """
        invoices = self.get_invoices()
        if status is None:
            return invoices

        status = DisplayStatus(status)
        now = self.clock()

        if status == DisplayStatus.PAID:
            return [i for i in invoices if i.status == InvoiceStatus.PAID]
        if status == DisplayStatus.OVERDUE:
            return [i for i in invoices if i.is_overdue(now)]
        if status == DisplayStatus.DUE_SOON:
            return [i for i in invoices if i.is_due_soon(now)]
        return [
            i for i in invoices
            if i.status != InvoiceStatus.PAID and not i.is_overdue(now)
        ]

    # ---- Settings ------------------------------------------------------

    def get_settings(self) -> Settings:
        return self.get_state().settings

    def update_settings(self, update: Union[SettingsUpdate, Dict[str, Any]]) -> Settings:
        if not isinstance(update, SettingsUpdate):
            update = SettingsUpdate.model_validate(update)

        with self._unit_of_work() as uow:
            changes = update.model_dump(exclude_unset=True, exclude_none=True)
            uow.state.settings = uow.state.settings.model_copy(update=changes)
            settings = uow.state.settings
            uow.commit()

        logger.info(f"Updated settings: {', '.join(changes) or 'no changes'}")
        return settings.model_copy()

    # ---- Statistics ----------------------------------------------------

    def get_invoice_stats(self) -> InvoiceStatsDTO:
        """
        Dashboard counters, read-only

        Unpaid invoices past their due date count as overdue here; persisting
        that transition is advance_overdue_invoices()'s job.
        """
        invoices = self.get_invoices()
        now = self.clock()

        unpaid = 0
        overdue = 0
        collected = Decimal("0")

        for invoice in invoices:
            if invoice.status == InvoiceStatus.PAID:
                paid_at = invoice.updated_at
                if paid_at.year == now.year and paid_at.month == now.month:
                    collected += invoice.totals.grand
            elif invoice.is_overdue(now):
                overdue += 1
            else:
                unpaid += 1

        return InvoiceStatsDTO(
            total=len(invoices),
            unpaid=unpaid,
            overdue=overdue,
            collected_this_month=round_money(collected),
        )

    def get_stats_summary(self) -> StatsSummaryDTO:
        stats = self.get_invoice_stats()
        invoices = self.get_invoices()

        total_value = sum((i.totals.grand for i in invoices), Decimal("0"))
        unpaid_value = sum(
            (i.totals.grand for i in invoices if i.status != InvoiceStatus.PAID),
            Decimal("0"),
        )
        average = total_value / stats.total if stats.total else Decimal("0")
        collection_rate = (
            (total_value - unpaid_value) / total_value * HUNDRED
            if total_value
            else Decimal("0")
        )

        return StatsSummaryDTO(
            **stats.model_dump(),
            total_value=round_money(total_value),
            unpaid_value=round_money(unpaid_value),
            average_invoice_value=round_money(average),
            collection_rate=round_money(collection_rate),
        )

    def advance_overdue_invoices(self) -> AdvanceOverdueResultDTO:
        """
        Persist unpaid -> overdue for every unpaid invoice past its due date

        Returns:
            AdvanceOverdueResultDTO with the numbers of the advanced invoices
        """
        start_time = time.time()
        now = self.clock()
        advanced_ids = []

        with self._unit_of_work() as uow:
            for index, invoice in enumerate(uow.state.invoices):
                advanced = advance_overdue(invoice, now)
                if advanced.status != invoice.status:
                    uow.state.invoices[index] = advanced
                    advanced_ids.append(advanced.id)
            checked = len(uow.state.invoices)

            if advanced_ids:
                uow.commit()

        if advanced_ids:
            logger.info(f"Advanced {len(advanced_ids)} invoice(s) to overdue: {', '.join(advanced_ids)}")

        return AdvanceOverdueResultDTO(
            invoices_checked=checked,
            invoices_advanced=len(advanced_ids),
            advanced_invoice_ids=advanced_ids,
            run_time=now,
            execution_time_ms=int((time.time() - start_time) * 1000),
        )

    # ---- Import / export -----------------------------------------------

    def export_json(self) -> str:
        return self.get_state().to_json(indent=2)

    def import_json(self, payload: str) -> bool:
        """
        Replace the whole state with an exported document

        The document must be an object with "clients" and "invoices" arrays and
        a "settings" object. Missing keys take their defaults. Nothing is
        written unless the whole document is valid.

        Returns:
            True if imported, False if rejected
        """
        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            logger.error(f"Import rejected, not JSON: {e}")
            return False

        if not self._has_document_shape(data):
            logger.error("Import rejected, invalid data structure")
            return False

        try:
            imported_settings = Settings.model_validate(data["settings"])
            settings = self.default_settings.model_copy(
                update=imported_settings.model_dump(include=imported_settings.model_fields_set)
            )
            state = StateDocument.model_validate({**data, "settings": settings})
        except ValueError as e:
            logger.error(f"Import rejected, invalid records: {e}")
            return False

        with self._unit_of_work() as uow:
            uow.state = state
            uow.commit()

        logger.info(
            f"Imported {len(state.clients)} client(s) and {len(state.invoices)} invoice(s)"
        )
        return True

    @staticmethod
    def _has_document_shape(data: Any) -> bool:
        return (
            isinstance(data, dict)
            and isinstance(data.get("clients"), list)
            and isinstance(data.get("invoices"), list)
            and isinstance(data.get("settings"), dict)
        )
