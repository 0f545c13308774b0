"""Unit tests for OverdueAdvancerWorker

Tests cover:
- run_once advancing past-due invoices
- Advancement disabled scenario
- run_forever continuous execution
- Error handling scenarios
"""

import pytest
import threading
from datetime import date
from unittest.mock import MagicMock, patch

from src.app.store.dtos import AdvanceOverdueResultDTO
from src.domain.base import utcnow
from src.domain.invoice import InvoiceStatus
from src.worker.overdue_advancer import OverdueAdvancerWorker


@pytest.fixture
def past_due_invoice(store, sample_invoice):
    """Saved invoice that fell due on 2024-01-10"""
    return store.save_invoice(
        sample_invoice.model_copy(
            deep=True, update={"issue_date": date(2024, 1, 1), "due_date": date(2024, 1, 10)}
        )
    )


@pytest.fixture
def mock_store():
    """Mock invoice store"""
    store = MagicMock()
    store.advance_overdue_invoices.return_value = AdvanceOverdueResultDTO(
        invoices_checked=3,
        invoices_advanced=0,
        advanced_invoice_ids=[],
        run_time=utcnow(),
        execution_time_ms=2,
    )
    return store


class TestOverdueAdvancerRunOnce:
    """Test run_once"""

    @pytest.mark.asyncio
    async def test_run_once_advances_past_due(self, store, past_due_invoice):
        """Test the past-due invoice is persisted as overdue"""
        # Arrange
        worker = OverdueAdvancerWorker(store=store)

        # Act
        result = await worker.run_once()

        # Assert
        assert result.invoices_advanced == 1
        assert result.advanced_invoice_ids == [past_due_invoice.id]
        assert store.get_invoice(past_due_invoice.id).status == InvoiceStatus.OVERDUE

    @pytest.mark.asyncio
    async def test_run_once_logs_advanced_invoices(self, store, past_due_invoice, caplog):
        """Test newly overdue invoices are reported as a warning"""
        # Arrange
        worker = OverdueAdvancerWorker(store=store)

        # Act
        with caplog.at_level("WARNING"):
            await worker.run_once()

        # Assert
        assert past_due_invoice.id in caplog.text

    @pytest.mark.asyncio
    async def test_run_once_disabled(self, mock_store):
        """Test nothing is evaluated when advancement is disabled"""
        # Arrange
        worker = OverdueAdvancerWorker(store=mock_store)

        # Act
        with patch("src.worker.overdue_advancer.ApplicationConfig") as mock_config:
            mock_config.OVERDUE_ADVANCE_ENABLED = False
            result = await worker.run_once()

        # Assert
        assert result.invoices_checked == 0
        assert result.invoices_advanced == 0
        mock_store.advance_overdue_invoices.assert_not_called()

    @pytest.mark.asyncio
    async def test_run_once_nothing_to_advance(self, mock_store):
        """Test the store result is passed through"""
        # Arrange
        worker = OverdueAdvancerWorker(store=mock_store)

        # Act
        result = await worker.run_once()

        # Assert
        assert result.invoices_checked == 3
        mock_store.advance_overdue_invoices.assert_called_once()

    @pytest.mark.asyncio
    async def test_run_once_keeps_store_io_off_event_loop(self, mock_store):
        """Test the blocking store call runs in a worker thread"""
        # Arrange
        result = mock_store.advance_overdue_invoices.return_value
        calling_threads = []

        def advance():
            calling_threads.append(threading.current_thread())
            return result

        mock_store.advance_overdue_invoices.side_effect = advance
        worker = OverdueAdvancerWorker(store=mock_store)

        # Act
        returned = await worker.run_once()

        # Assert
        assert returned == result
        assert calling_threads
        assert calling_threads[0] is not threading.current_thread()


class TestOverdueAdvancerRunForever:
    """Test run_forever"""

    @pytest.mark.asyncio
    async def test_run_forever_sleeps_between_cycles(self, mock_store):
        """Test one cycle runs before sleeping for the interval"""
        # Arrange
        worker = OverdueAdvancerWorker(store=mock_store)

        # Act
        with patch("src.worker.overdue_advancer.asyncio.sleep", side_effect=RuntimeError("stop")) as mock_sleep:
            with pytest.raises(RuntimeError, match="stop"):
                await worker.run_forever(interval_seconds=60)

        # Assert
        mock_store.advance_overdue_invoices.assert_called_once()
        mock_sleep.assert_called_once_with(60)

    @pytest.mark.asyncio
    async def test_run_forever_survives_failed_cycle(self, mock_store, caplog):
        """Test a failing cycle is logged and the loop keeps going"""
        # Arrange
        mock_store.advance_overdue_invoices.side_effect = OSError("disk full")
        worker = OverdueAdvancerWorker(store=mock_store)

        # Act
        with patch("src.worker.overdue_advancer.asyncio.sleep", side_effect=RuntimeError("stop")) as mock_sleep:
            with caplog.at_level("ERROR"):
                with pytest.raises(RuntimeError, match="stop"):
                    await worker.run_forever(interval_seconds=5)

        # Assert
        assert "disk full" in caplog.text
        mock_sleep.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_run_forever_default_interval(self, mock_store):
        """Test the configured interval is used when none is given"""
        # Arrange
        worker = OverdueAdvancerWorker(store=mock_store)

        # Act
        with patch("src.worker.overdue_advancer.ApplicationConfig") as mock_config, \
                patch("src.worker.overdue_advancer.asyncio.sleep", side_effect=RuntimeError("stop")) as mock_sleep:
            mock_config.OVERDUE_ADVANCE_ENABLED = True
            mock_config.OVERDUE_ADVANCE_INTERVAL_SECONDS = 900
            with pytest.raises(RuntimeError):
                await worker.run_forever()

        # Assert
        mock_sleep.assert_called_once_with(900)
