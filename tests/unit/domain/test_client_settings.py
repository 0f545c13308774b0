"""Unit tests for Client and Settings domain entities"""

import pytest
from datetime import datetime, timezone
from pydantic import ValidationError
from src.domain.client import Client, ClientUpdate
from src.domain.settings import Currency, Settings, SettingsUpdate
from src.domain.state_document import StateDocument


class TestClientValidation:
    """Test Client validation rules"""

    def test_valid_client(self):
        """Test a named client with well-formed contact details passes"""
        # Arrange
        client = Client(name="Juan Dela Cruz", email="juan@example.com", phone="(02) 8123-4567")

        # Act
        result = client.validate()

        # Assert
        assert result.is_valid is True

    def test_contact_details_optional(self):
        """Test empty email and phone are allowed"""
        assert Client(name="Jo").validate().is_valid is True

    def test_short_name_rejected(self):
        """Test names under 2 characters (after trimming) fail"""
        # Act
        result = Client(name=" A ").validate()

        # Assert
        assert result.errors == ["Name is required and must be at least 2 characters"]

    def test_malformed_email_and_phone(self):
        """Test both contact rules are reported"""
        # Arrange
        client = Client(name="Ana Reyes", email="ana@@example", phone="12345")

        # Act
        result = client.validate()

        # Assert
        assert result.is_valid is False
        assert result.errors == ["Invalid email format", "Invalid phone format"]

    @pytest.mark.parametrize("phone", ["0917-555-010x", "call me maybe"])
    def test_phone_with_letters_rejected(self, phone):
        """Test only digits, spaces and - + ( ) are allowed"""
        assert Client(name="Ana Reyes", phone=phone).validate().errors == ["Invalid phone format"]


class TestClientRecord:
    """Test Client serialization and helpers"""

    def test_display_name_includes_company(self):
        """Test the company is shown in parentheses"""
        # Arrange & Act & Assert
        assert Client(name="Maria", company="Santos Bakery").display_name == "Maria (Santos Bakery)"
        assert Client(name="Maria").display_name == "Maria"

    def test_document_keys(self):
        """Test taxId / createdAt keys in the document format"""
        # Arrange
        client = Client.model_validate({"name": "Maria", "taxId": "123-456", "company": None})

        # Act
        dumped = client.model_dump(by_alias=True)

        # Assert
        assert client.tax_id == "123-456"
        assert client.company == ""
        assert "taxId" in dumped
        assert "updatedAt" in dumped

    def test_update_rejects_unknown_field(self):
        """Test ClientUpdate only knows client fields"""
        with pytest.raises(ValidationError):
            ClientUpdate(nickname="Mia")


class TestSettings:
    """Test Settings rules and invoice number formatting"""

    def test_defaults(self):
        """Test INV / PHP / seed 1"""
        # Arrange & Act
        settings = Settings()

        # Assert
        assert settings.invoice_prefix == "INV"
        assert settings.currency == "PHP"
        assert settings.number_seed == 1
        assert settings.currency_symbol == "₱"

    def test_invoice_number_format(self):
        """Test {prefix}-{YYYYMM}-{seed padded to 3}"""
        # Arrange
        settings = Settings(invoice_prefix="ACME", number_seed=7)

        # Act
        number = settings.format_invoice_number(datetime(2024, 1, 31, tzinfo=timezone.utc))

        # Assert
        assert number == "ACME-202401-007"

    def test_seed_wider_than_padding(self):
        """Test seeds above 999 are not truncated"""
        # Arrange
        settings = Settings(number_seed=1234)

        # Act & Assert
        assert settings.format_invoice_number(datetime(2024, 12, 1)) == "INV-202412-1234"

    def test_invalid_settings(self):
        """Test every settings rule, in order"""
        # Arrange
        settings = Settings(invoice_prefix="", currency="JPY", number_seed=0)

        # Act
        result = settings.validate()

        # Assert
        assert result.errors == [
            "Invoice prefix is required",
            "Number seed must be at least 1",
            "Invalid currency selection",
        ]

    def test_prefix_too_long(self):
        """Test prefixes over 10 characters fail"""
        assert Settings(invoice_prefix="ABCDEFGHIJK").validate().errors == [
            "Invoice prefix must be 10 characters or less"
        ]

    def test_unknown_currency_symbol_falls_back_to_code(self):
        """Test the code is shown for currencies without a symbol"""
        assert Settings(currency="JPY").currency_symbol == "JPY"

    @pytest.mark.parametrize("currency", list(Currency))
    def test_every_supported_currency_has_symbol_and_validates(self, currency):
        """Test the Currency enum alone decides what is supported"""
        # Arrange
        settings = Settings(currency=currency.value)

        # Act & Assert
        assert settings.validate().is_valid is True
        assert settings.currency_symbol == currency.symbol
        assert settings.currency_symbol != currency.value

    def test_unsupported_currency_loads_and_is_reported(self):
        """Test an unknown code is kept and flagged by validate()"""
        # Arrange & Act
        settings = Settings.model_validate({"currency": "JPY"})

        # Assert
        assert settings.currency == "JPY"
        assert Currency.from_code("JPY") is None
        assert settings.validate().errors == ["Invalid currency selection"]

    def test_update_rejects_unknown_field(self):
        """Test SettingsUpdate only knows settings fields"""
        with pytest.raises(ValidationError):
            SettingsUpdate(theme="dark")


class TestStateDocument:
    """Test the whole-state document"""

    def test_empty_document_defaults(self):
        """Test an empty object yields no records and default settings"""
        # Act
        state = StateDocument.from_json("{}")

        # Assert
        assert state.clients == []
        assert state.invoices == []
        assert state.settings == Settings()

    def test_round_trip_preserves_records(self, sample_invoice, client_record):
        """Test serialize then parse yields equal records"""
        # Arrange
        state = StateDocument(clients=[client_record], invoices=[sample_invoice])

        # Act
        restored = StateDocument.from_json(state.to_json())

        # Assert
        assert restored == state
        assert restored.invoice_index(sample_invoice.id) == 0
        assert restored.client_index(client_record.id) == 0
        assert restored.client_index("c_missing") is None

    def test_malformed_document_raises(self):
        """Test structural errors surface as ValidationError"""
        with pytest.raises(ValidationError):
            StateDocument.from_json('{"invoices": "nope"}')
