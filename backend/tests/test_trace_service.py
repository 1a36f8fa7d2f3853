"""
Traceability API — Trace Service Unit Tests
============================================

What:  Tests for TraceService business logic with a mock session.
How:   No database: the session's execute/commit are AsyncMocks.

What we test:
    ✅ Presence checks raise ValidationError and skip the insert
    ✅ Zero values count as present
    ✅ Missing product raises NotFoundError
    ✅ Fan-out returns the first row and logs a warning
    ✅ Database failures become InternalError with the endpoint's message
    ✅ ProductID format
"""

import logging
import re
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from traceability.exceptions import InternalError, NotFoundError, ValidationError
from traceability.models import FarmerLog, Product, RetailerLog
from traceability.schemas.trace import (
    DistributorLogRequest,
    FarmerLogRequest,
    ProductInitRequest,
    RetailerLogRequest,
)
from traceability.services.trace_service import TraceService, generate_product_id

PRODUCT_ID_PATTERN = re.compile(r"^PID-\d+-\d{1,3}$")


def _journey_row(**overrides):
    row = {
        "ProductID": "PID-1-1",
        "ProductType": "Mango",
        "BatchID": "B1",
        "DateHarvested": None,
        "farmerLat": None,
        "farmerLon": None,
        "InitialCost": None,
        "DateShipped": None,
        "distributorLocation": None,
        "DistributionCost": None,
        "DateSold": None,
        "Store_Name": None,
        "FinalPrice": None,
    }
    row.update(overrides)
    return row


def _db_error():
    return OperationalError("INSERT ...", {}, Exception("connection reset"))


class TestGenerateProductId:

    def test_format(self):
        assert PRODUCT_ID_PATTERN.match(generate_product_id())

    def test_uses_epoch_millis_and_random_suffix(self):
        with patch("traceability.services.trace_service.time.time", return_value=1700000000.5), \
             patch("traceability.services.trace_service.random.randrange", return_value=42):
            assert generate_product_id() == "PID-1700000000500-42"


class TestGetJourney:

    def setup_method(self):
        self.service = TraceService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("product_id", [None, "", "   "])
    async def test_missing_id_raises_validation_error(self, mock_db_session, product_id):
        with pytest.raises(ValidationError, match="Product ID is required."):
            await self.service.get_journey(mock_db_session, product_id)
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_product_raises_not_found(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.mappings.return_value.all.return_value = []
        mock_db_session.execute.return_value = mock_result

        with pytest.raises(NotFoundError, match="Product journey not found."):
            await self.service.get_journey(mock_db_session, "PID-404-4")

    @pytest.mark.asyncio
    async def test_returns_joined_row(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.mappings.return_value.all.return_value = [
            _journey_row(
                DateHarvested=date(2024, 1, 1),
                farmerLat=Decimal("1.000000"),
                farmerLon=Decimal("2.000000"),
                InitialCost=Decimal("5.00"),
            )
        ]
        mock_db_session.execute.return_value = mock_result

        result = await self.service.get_journey(mock_db_session, "PID-1-1")

        assert result.message == "Supply Chain Journey Retrieved"
        assert result.journey.product_type == "Mango"
        assert result.journey.date_harvested == date(2024, 1, 1)
        assert result.journey.farmer_lat == 1.0
        assert result.journey.initial_cost == 5.0
        assert result.journey.date_shipped is None
        assert result.journey.store_name is None

    @pytest.mark.asyncio
    async def test_fan_out_returns_first_row_and_warns(self, mock_db_session, caplog):
        mock_result = MagicMock()
        mock_result.mappings.return_value.all.return_value = [
            _journey_row(DateHarvested=date(2024, 1, 1), farmerLat=Decimal("1")),
            _journey_row(DateHarvested=date(2024, 2, 1), farmerLat=Decimal("3")),
        ]
        mock_db_session.execute.return_value = mock_result

        with caplog.at_level(logging.WARNING, logger="traceability.services.trace_service"):
            result = await self.service.get_journey(mock_db_session, "PID-1-1")

        assert result.journey.date_harvested == date(2024, 1, 1)
        assert "fans out to 2 rows" in caplog.text

    @pytest.mark.asyncio
    async def test_database_error_raises_internal_error(self, mock_db_session):
        mock_db_session.execute.side_effect = _db_error()

        with pytest.raises(InternalError) as exc_info:
            await self.service.get_journey(mock_db_session, "PID-1-1")

        assert exc_info.value.message == "Internal Server Error during data retrieval."
        assert exc_info.value.context["error_type"] == "OperationalError"


class TestInitProduct:

    def setup_method(self):
        self.service = TraceService()

    @pytest.mark.asyncio
    async def test_inserts_product_and_returns_id(self, mock_db_session):
        body = ProductInitRequest(ProductType="Mango", BatchID="B1")

        result = await self.service.init_product(mock_db_session, body)

        assert PRODUCT_ID_PATTERN.match(result.product_id)
        added = mock_db_session.add.call_args.args[0]
        assert isinstance(added, Product)
        assert added.product_id == result.product_id
        assert added.product_type == "Mango"
        assert added.batch_id == "B1"
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_body_stores_nulls(self, mock_db_session):
        result = await self.service.init_product(mock_db_session, None)

        added = mock_db_session.add.call_args.args[0]
        assert added.product_type is None
        assert added.batch_id is None
        assert result.message.startswith("Product initialized successfully.")

    @pytest.mark.asyncio
    async def test_commit_failure_raises_internal_error(self, mock_db_session):
        mock_db_session.commit.side_effect = _db_error()

        with pytest.raises(InternalError, match="Failed to initialize product."):
            await self.service.init_product(mock_db_session, ProductInitRequest())


class TestLogFarmer:

    def setup_method(self):
        self.service = TraceService()

    @pytest.mark.asyncio
    async def test_valid_log_is_inserted(self, mock_db_session):
        body = FarmerLogRequest(
            ProductID="PID-1-1",
            DateHarvested="2024-01-01",
            Location_Lat=1.0,
            Location_Lon=2.0,
            InitialCost=5,
        )

        result = await self.service.log_farmer(mock_db_session, body)

        assert result.message == "Farmer log recorded successfully."
        added = mock_db_session.add.call_args.args[0]
        assert isinstance(added, FarmerLog)
        assert added.product_id == "PID-1-1"
        assert added.date_harvested == date(2024, 1, 1)
        assert added.initial_cost == Decimal("5")
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_zero_latitude_is_present(self, mock_db_session):
        body = FarmerLogRequest(ProductID="PID-1-1", DateHarvested="2024-01-01", Location_Lat=0)

        await self.service.log_farmer(mock_db_session, body)

        mock_db_session.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_missing_fields_are_reported_and_nothing_inserted(self, mock_db_session):
        body = FarmerLogRequest(ProductID="  ", Location_Lon=2.0)

        with pytest.raises(ValidationError, match="Missing required farmer fields.") as exc_info:
            await self.service.log_farmer(mock_db_session, body)

        assert exc_info.value.missing == ["ProductID", "DateHarvested", "Location_Lat"]
        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_body_is_a_validation_error(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.log_farmer(mock_db_session, None)


class TestLogDistributorAndRetailer:

    def setup_method(self):
        self.service = TraceService()

    @pytest.mark.asyncio
    async def test_distributor_requires_address(self, mock_db_session):
        body = DistributorLogRequest(ProductID="PID-1-1", DateShipped="2024-01-05")

        with pytest.raises(ValidationError, match="Missing required distributor fields.") as exc_info:
            await self.service.log_distributor(mock_db_session, body)

        assert exc_info.value.missing == ["Location_Address"]
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_distributor_success(self, mock_db_session):
        body = DistributorLogRequest(
            ProductID="PID-1-1",
            DateShipped="2024-01-05",
            Location_Address="12 Harbour Rd",
            DistributionCost="2.50",
        )

        result = await self.service.log_distributor(mock_db_session, body)

        assert result.message == "Distributor log recorded successfully."
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_retailer_success(self, mock_db_session):
        body = RetailerLogRequest(
            ProductID="PID-1-1",
            Store_Name="Corner Market",
            DateSold="2024-01-09",
            FinalPrice=9.99,
        )

        result = await self.service.log_retailer(mock_db_session, body)

        assert result.message == "Retailer log recorded successfully."
        added = mock_db_session.add.call_args.args[0]
        assert isinstance(added, RetailerLog)
        assert added.store_name == "Corner Market"

    @pytest.mark.asyncio
    async def test_retailer_commit_failure_raises_internal_error(self, mock_db_session):
        mock_db_session.commit.side_effect = _db_error()
        body = RetailerLogRequest(ProductID="PID-1-1", Store_Name="Corner Market", DateSold="2024-01-09")

        with pytest.raises(InternalError) as exc_info:
            await self.service.log_retailer(mock_db_session, body)

        assert exc_info.value.message == "Failed to record retailer log."
        assert exc_info.value.context["product_id"] == "PID-1-1"
