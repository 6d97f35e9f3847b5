"""
Product Registry Routes
Create, verify and finalize products; look them up; poll pending transitions
"""
from flask import Blueprint, request, current_app
import logging

from product_registry.api.middleware.auth_middleware import auth_middleware
from product_registry.api.middleware.response_middleware import response_middleware
from product_registry.core.exceptions import ConfirmationTimeout
from product_registry.models.enums import TransitionType
from product_registry.models.product import product_reference

product_bp = Blueprint('products', __name__)
transition_bp = Blueprint('transitions', __name__)
logger = logging.getLogger(__name__)


def get_ledger():
    return current_app.extensions['registry'].ledger


def _wants_confirmation() -> bool:
    return request.args.get('wait', 'false').lower() in ('1', 'true', 'yes')


def _pending_response(pending):
    return response_middleware.create_success_response(
        pending.to_dict(),
        message=f"{pending.transition.value} submitted",
        status_code=202,
        headers={'Location': f"/v1/transitions/{pending.handle_id}"}
    )


def _resolve(pending):
    """Answer with the committed product, or 202 + handle when it is still pending"""
    if not _wants_confirmation():
        return _pending_response(pending)

    try:
        value = pending.result(timeout=current_app.config['CONFIRMATION_TIMEOUT_SECONDS'])
    except ConfirmationTimeout:
        return _pending_response(pending)

    if pending.transition is TransitionType.CREATE:
        product = get_ledger().get(value)
        return response_middleware.create_success_response(
            product.to_dict(),
            message="Product created",
            status_code=201,
            headers={'Location': product_reference(product.id)}
        )

    product = get_ledger().get(pending.product_id)
    return response_middleware.create_success_response(
        product.to_dict(), message=f"Product {value.label.lower()}"
    )


@product_bp.route('', methods=['POST'])
@auth_middleware.caller_required
def create_product(caller):
    """Mint a new product (manufacturer)"""
    data = request.get_json(silent=True) or {}

    pending = get_ledger().create(
        batch_id=data.get('batch_id', data.get('batchId')),
        certification=data.get('certification'),
        origin=data.get('origin'),
        timestamp=data.get('timestamp'),
        caller=caller
    )
    return _resolve(pending)


@product_bp.route('/<product_id>/verify', methods=['POST'])
@auth_middleware.caller_required
def verify_product(caller, product_id):
    """Move a product from Created to Verified (distributor)"""
    return _resolve(get_ledger().verify(product_id, caller))


@product_bp.route('/<product_id>/finalize', methods=['POST'])
@auth_middleware.caller_required
def finalize_product(caller, product_id):
    """Move a product from Verified to Finalized (retailer)"""
    return _resolve(get_ledger().finalize(product_id, caller))


@product_bp.route('/<product_id>', methods=['GET'])
@auth_middleware.caller_required
def get_product(caller, product_id):
    product = get_ledger().get(product_id)
    return response_middleware.create_success_response(product.to_dict())


@product_bp.route('', methods=['GET'])
@auth_middleware.caller_required
def list_products(caller):
    """Products newest first with offset/limit pagination"""
    result = get_ledger().page(
        offset=request.args.get('offset', 0),
        limit=request.args.get('limit', 20)
    )
    return response_middleware.create_success_response(result)


@transition_bp.route('/<handle_id>', methods=['GET'])
@auth_middleware.caller_required
def get_transition(caller, handle_id):
    pending = get_ledger().get_handle(handle_id)
    return response_middleware.create_success_response(pending.to_dict())
