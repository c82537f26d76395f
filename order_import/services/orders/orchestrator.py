"""
OrderImportOrchestrator - Main coordinator (SOLID compliant).

This orchestrator follows:
- SRP: Only coordinates the order import flow
- OCP: Open for extension via new importers
- DIP: Depends on repository abstractions, not concrete implementations

An import is all-or-nothing: the order is either fully populated and
persisted, or removed again.
"""

import contextlib
import copy
import logging
from typing import Any, Mapping, Optional

from order_import.core.config import Settings, get_settings
from order_import.core.logging_config import LogContext
from order_import.domain.models import OrderDomain, generate_order_number
from order_import.services.orders.context import ImportContext
from order_import.services.orders.importers import (
    AdjustmentImporter,
    LineItemImporter,
    PaymentImporter,
    ShipmentImporter,
)
from order_import.services.orders.interfaces import IOrderRepository, IReferenceRepository, ITaxCalculator
from order_import.services.orders.normalizers import AddressNormalizer
from order_import.services.orders.resolvers import ReferenceDataResolver, VariantResolver
from order_import.services.orders.taxes import RateTaxCalculator
from order_import.services.orders.validators import OrderAttributesValidator
from order_import.utils.coercion import is_truthy, parse_timestamp
from order_import.utils.error_handler import (
    AppException,
    OrderImportException,
    PersistenceException,
    ValidationException,
    log_error,
    root_cause,
)

logger = logging.getLogger(__name__)

# Rails-style nested attribute spellings accepted from API clients
PAYLOAD_ALIASES = {
    "ship_address_attributes": "ship_address",
    "bill_address_attributes": "bill_address",
    "shipments_attributes": "shipments",
    "line_items_attributes": "line_items",
    "adjustments_attributes": "adjustments",
    "payments_attributes": "payments",
}

# Keys consumed by the import steps; everything else is an order attribute
IMPORT_KEYS = frozenset({"shipments", "line_items", "adjustments", "payments", "completed_at", "import"})


class OrderImportOrchestrator:
    """
    Orchestrates building a complete order from an external payload.

    Each step is delegated to an injected service:
    1. Normalize addresses
    2. Create the order
    3. Import shipments, line items, adjustments and payments
    4. Complete the order
    5. Drop tax adjustments of pre-taxed imports
    6. Apply the remaining attributes
    7. Reload the persisted order
    """

    def __init__(
        self,
        order_repo: IOrderRepository,
        address_normalizer: AddressNormalizer,
        shipment_importer: ShipmentImporter,
        line_item_importer: LineItemImporter,
        adjustment_importer: AdjustmentImporter,
        payment_importer: PaymentImporter,
        attributes_validator: OrderAttributesValidator,
        tax_calculator: Optional[ITaxCalculator] = None,
        currency: str = "USD",
        channel: str = "api",
        number_prefix: str = "R",
        use_transaction: bool = True,
    ):
        """
        Initialize orchestrator with service dependencies (DIP).

        Args:
            order_repo: Repository for order writes
            address_normalizer: Service resolving address country/state
            shipment_importer: Service importing shipments
            line_item_importer: Service importing line items
            adjustment_importer: Service importing adjustments
            payment_importer: Service importing payments
            attributes_validator: Privilege-gated attribute validation
            tax_calculator: Optional automatic tax calculation
            currency: Currency of orders that don't specify one
            channel: Channel assigned to new orders
            number_prefix: Prefix of generated order numbers
            use_transaction: Run the persistence steps in one transaction
        """
        self.order_repo = order_repo
        self.address_normalizer = address_normalizer
        self.shipment_importer = shipment_importer
        self.line_item_importer = line_item_importer
        self.adjustment_importer = adjustment_importer
        self.payment_importer = payment_importer
        self.attributes_validator = attributes_validator
        self.tax_calculator = tax_calculator
        self.currency = currency
        self.channel = channel
        self.number_prefix = number_prefix
        self.use_transaction = use_transaction

    async def import_order(self, payload: Mapping[str, Any], context: Optional[ImportContext] = None) -> OrderDomain:
        """
        Build and persist a complete order from ``payload``.

        Args:
            payload: External order payload (never mutated)
            context: Caller context deciding which attributes are writable

        Returns:
            OrderDomain: The order as reloaded from the repository

        Raises:
            AppException: The typed failure of the step that failed
            OrderImportException: Any unexpected failure (cause chained)
        """
        context = context or ImportContext()
        params = self._prepare_payload(payload)
        order: Optional[OrderDomain] = None
        committed = False

        try:
            logger.info(f"Starting order import (caller={context.user_id}, admin={context.is_admin})")

            # Step 1: Normalize addresses before anything is persisted
            for name in ("ship_address", "bill_address"):
                if name in params:
                    params[name] = await self.address_normalizer.normalize(params[name])

            order = self._new_order(params)

            with LogContext(order_number=order.number, user_id=context.user_id):
                async with self._unit_of_work():
                    await self._populate(order, params, context)
                committed = True

                # Step 7: Reload
                reloaded = await self.order_repo.get_order(order.id)
                if reloaded is None:
                    raise PersistenceException(message=f"Order {order.number} vanished after import", operation="reload")

                logger.info(
                    f"Successfully imported order {reloaded.number} (id={reloaded.id}, "
                    f"state={reloaded.state.value}, total={reloaded.total})"
                )
                return reloaded

        except AppException as e:
            self._log_failure(e, order, context)
            await self._discard(order, committed)
            raise
        except Exception as e:
            self._log_failure(e, order, context)
            await self._discard(order, committed)
            raise OrderImportException(payload=params, cause=e) from e

    async def _populate(self, order: OrderDomain, params: dict[str, Any], context: ImportContext) -> None:
        """Steps 2-6, run inside the unit of work."""
        # Step 2: Create the order
        logger.debug(f"Creating order {order.number}")
        saved = await self.order_repo.create_order(order)
        order.id = saved.id

        # Step 3: Children, in fixed order
        await self.shipment_importer.import_shipments(order, params.get("shipments") or [])
        await self.line_item_importer.import_line_items(order, self._as_mapping(params.get("line_items")))
        await self.adjustment_importer.import_adjustments(order, params.get("adjustments") or [])
        await self.payment_importer.import_payments(order, params.get("payments") or [])
        await self._apply_automatic_taxes(order)

        # Step 4: Completion
        completed_at = params.get("completed_at")
        if completed_at:
            order.complete(self._parse_completed_at(completed_at))
            logger.debug(f"Order {order.number} completed at {order.completed_at.isoformat()}")

        # Step 5: Pre-taxed imports
        if is_truthy(params.get("import")):
            await self._remove_tax_adjustments(order)

        # Step 6: Remaining attributes
        attributes = {key: value for key, value in params.items() if key not in IMPORT_KEYS}
        sanitized = self.attributes_validator.sanitize(attributes, context)
        order.apply_attributes(sanitized)
        self.attributes_validator.validate_order(order)
        await self.order_repo.update_order(order)

    def _prepare_payload(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        if not isinstance(payload, Mapping):
            raise ValidationException(
                message="Order payload must be an object",
                field="payload",
                invalid_value=type(payload).__name__,
            )

        params = copy.deepcopy(dict(payload))
        for alias, name in PAYLOAD_ALIASES.items():
            if alias in params:
                value = params.pop(alias)
                params.setdefault(name, value)
        return params

    def _new_order(self, params: Mapping[str, Any]) -> OrderDomain:
        currency = params.get("currency") or self.currency
        if not isinstance(currency, str) or len(currency) != 3 or not currency.isalpha():
            raise ValidationException(message="Invalid currency code", field="currency", invalid_value=currency)

        return OrderDomain(
            number=generate_order_number(self.number_prefix),
            currency=currency.upper(),
            channel=self.channel,
        )

    def _unit_of_work(self):
        if self.use_transaction:
            return self.order_repo.transaction()
        return contextlib.nullcontext()

    @staticmethod
    def _as_mapping(line_items: Any) -> Mapping[Any, Any]:
        """Line items arrive keyed by index; plain lists are accepted too."""
        if not line_items:
            return {}
        if isinstance(line_items, Mapping):
            return line_items
        return {str(index): item for index, item in enumerate(line_items)}

    @staticmethod
    def _parse_completed_at(value: Any):
        try:
            return parse_timestamp(value)
        except ValueError as e:
            raise ValidationException(
                message=f"Invalid completed_at timestamp: {e}",
                field="completed_at",
                invalid_value=value,
                expected_format="ISO 8601",
            ) from e

    async def _apply_automatic_taxes(self, order: OrderDomain) -> None:
        if self.tax_calculator is None:
            return

        for adjustment in self.tax_calculator.compute(order):
            saved = await self.order_repo.save_adjustment(order.id, adjustment)
            adjustment.id = saved.id
            order.adjustments.append(adjustment)

    async def _remove_tax_adjustments(self, order: OrderDomain) -> None:
        tax_ids = {adjustment.id for adjustment in order.tax_adjustments if adjustment.id is not None}
        if tax_ids:
            removed = await self.order_repo.delete_adjustments(sorted(tax_ids))
            logger.debug(f"Removed {removed} tax adjustments from imported order {order.number}")
        order.remove_adjustments(tax_ids)

    @staticmethod
    def _log_failure(error: Exception, order: Optional[OrderDomain], context: ImportContext) -> None:
        log_error(
            error,
            context={
                "failed_order": order.number if order else None,
                "caller": context.user_id,
                "root_cause_type": type(root_cause(error)).__name__,
            },
        )

    async def _discard(self, order: Optional[OrderDomain], committed: bool) -> None:
        """
        Compensating delete for an order left behind by a failed import.

        A unit of work that did not commit has already rolled the order back;
        its ID may belong to another order by now, so nothing is deleted.
        """
        if order is None or order.id is None:
            return
        if self.use_transaction and not committed:
            return

        try:
            if await self.order_repo.order_exists(order.id):
                await self.order_repo.delete_order(order.id)
                logger.warning(f"Discarded partially imported order {order.number} (id={order.id})")
        except Exception as cleanup_error:
            logger.error(f"Could not discard order {order.number} (id={order.id}): {cleanup_error}")


# Factory function to create orchestrator with all dependencies
def create_orchestrator(
    order_repo: IOrderRepository,
    reference_repo: IReferenceRepository,
    settings: Optional[Settings] = None,
) -> OrderImportOrchestrator:
    """
    Factory function to create a fully initialized orchestrator.

    Args:
        order_repo: Repository for order writes
        reference_repo: Repository for reference and catalog lookups
        settings: Configuration (defaults to ``get_settings()``)

    Returns:
        OrderImportOrchestrator: Fully configured orchestrator
    """
    settings = settings or get_settings()

    reference_resolver = ReferenceDataResolver(reference_repo=reference_repo)
    variant_resolver = VariantResolver(reference_repo=reference_repo)

    tax_calculator = None
    if settings.automatic_taxes_enabled:
        tax_calculator = RateTaxCalculator(rate=settings.AUTOMATIC_TAX_RATE, label=settings.AUTOMATIC_TAX_LABEL)

    return OrderImportOrchestrator(
        order_repo=order_repo,
        address_normalizer=AddressNormalizer(reference_resolver=reference_resolver),
        shipment_importer=ShipmentImporter(
            order_repo=order_repo, reference_repo=reference_repo, variant_resolver=variant_resolver
        ),
        line_item_importer=LineItemImporter(order_repo=order_repo, variant_resolver=variant_resolver),
        adjustment_importer=AdjustmentImporter(order_repo=order_repo),
        payment_importer=PaymentImporter(
            order_repo=order_repo, reference_repo=reference_repo, default_state=settings.DEFAULT_PAYMENT_STATE
        ),
        attributes_validator=OrderAttributesValidator(reject_protected=settings.REJECT_PROTECTED_ATTRIBUTES),
        tax_calculator=tax_calculator,
        currency=settings.CURRENCY,
        channel=settings.DEFAULT_ORDER_CHANNEL,
        number_prefix=settings.ORDER_NUMBER_PREFIX,
        use_transaction=settings.ORDER_IMPORT_USE_TRANSACTION,
    )
