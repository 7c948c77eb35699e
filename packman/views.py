"""
JSON views over the ledger and the fulfillment engine.

    POST   documents/                 create
    GET    documents/<id>/            read
    PUT    documents/<id>/            update (If-Match: <version>)
    DELETE documents/<id>/            delete
    POST   documents/<id>/approve/    approve
    POST   documents/<id>/transmit/   transmit to the destination store
    GET    stock/<store>/             list entries of a store
    GET    stock/<store>/<product>/   single entry

Authentication and role checks belong to the host project.
"""

import json
import logging

from django.http import JsonResponse
from django.utils.dateparse import parse_date
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from packman.exceptions import StockError
from packman.models.enums import DocumentKind
from packman.serializers import rejected_lines, serialize_document, serialize_entry
from packman.services.fulfillment import FulfillmentEngine
from packman.services.ledger import StockLedger

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    'LINES_REJECTED': 422,
    'INVALID_QUANTITY': 422,
    'INSUFFICIENT_STOCK': 422,
    'UNKNOWN_STORE_OR_PRODUCT': 422,
    'DOCUMENT_NOT_FOUND': 404,
    'DOCUMENT_IMMUTABLE': 409,
    'CONCURRENT_CONFLICT': 409,
    'DOCUMENT_NOT_TRANSMITTABLE': 409,
    'DOCUMENT_ALREADY_TRANSMITTED': 409,
    'INVALID_STORE': 422,
}

RESERVED_METADATA_KEYS = frozenset({
    'source_store', 'destination_store', 'lines', 'kind', 'number',
    'document_date', 'document_id', 'expected_version', 'user',
})


class BadPayload(ValueError):
    """Request body could not be understood."""


def _payload(request) -> dict:
    try:
        data = json.loads(request.body or b'{}')
    except ValueError as exc:
        raise BadPayload(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise BadPayload("Body must be a JSON object")
    return data


def _lines(data: dict) -> list[dict]:
    lines = data.get('lines', [])
    if not isinstance(lines, list) or not all(isinstance(line, dict) for line in lines):
        raise BadPayload("'lines' must be a list of objects")
    return lines


def _metadata(data: dict) -> dict:
    metadata = data.get('metadata') or {}
    if not isinstance(metadata, dict):
        raise BadPayload("'metadata' must be an object")
    clashing = sorted(RESERVED_METADATA_KEYS.intersection(metadata))
    if clashing:
        raise BadPayload(f"'metadata' cannot use reserved keys: {clashing}")
    return metadata


def _document_date(data: dict):
    raw = data.get('document_date')
    if raw in (None, ''):
        return None
    if not isinstance(raw, str):
        raise BadPayload("'document_date' must be YYYY-MM-DD")
    try:
        value = parse_date(raw)
    except (ValueError, TypeError) as exc:
        raise BadPayload(f"'document_date' is not a valid date: {raw}") from exc
    if value is None:
        raise BadPayload("'document_date' must be YYYY-MM-DD")
    return value


def _prices(data: dict) -> dict:
    prices = data.get('prices') or {}
    if not isinstance(prices, dict):
        raise BadPayload("'prices' must be an object of product_id -> price")
    return prices


def _currency(data: dict) -> str | None:
    currency = data.get('currency')
    if currency in (None, ''):
        return None
    if not isinstance(currency, str) or len(currency) != 3 or not currency.isalpha():
        raise BadPayload("'currency' must be a 3-letter code")
    return currency.upper()


def _expected_version(request, data: dict) -> int | None:
    raw = request.headers.get('If-Match') or data.get('version')
    if raw in (None, ''):
        return None
    try:
        return int(str(raw).strip('"'))
    except ValueError as exc:
        raise BadPayload("Version must be an integer") from exc


def _user(request):
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user
    return None


def _bad_request(exc: BadPayload) -> JsonResponse:
    return JsonResponse(
        {'code': 'BAD_REQUEST', 'message': str(exc), 'data': {}},
        status=400,
    )


def _stock_error(exc: StockError, submitted=None) -> JsonResponse:
    body = exc.as_dict()
    body['retryable'] = exc.retryable
    if submitted is not None and exc.code == 'LINES_REJECTED':
        body['lines'] = rejected_lines(submitted, exc.rejections)
    return JsonResponse(body, status=ERROR_STATUS.get(exc.code, 400))


@method_decorator(csrf_exempt, name='dispatch')
class DocumentCollectionView(View):
    """Create documents."""

    def post(self, request):
        submitted = None
        try:
            data = _payload(request)
            submitted = _lines(data)
            document_date = _document_date(data)
            kind = data.get('kind', DocumentKind.PACKING_LIST)
            if kind not in DocumentKind.values:
                raise BadPayload(f"'kind' must be one of {DocumentKind.values}")
            if not data.get('source_store'):
                raise BadPayload("'source_store' is required")

            document = FulfillmentEngine.create(
                str(data['source_store']),
                submitted,
                kind=kind,
                destination_store=str(data.get('destination_store') or ''),
                number=str(data.get('number') or ''),
                document_date=document_date,
                user=_user(request),
                **_metadata(data),
            )
        except BadPayload as exc:
            return _bad_request(exc)
        except StockError as exc:
            return _stock_error(exc, submitted)

        return JsonResponse(serialize_document(document), status=201)


@method_decorator(csrf_exempt, name='dispatch')
class DocumentDetailView(View):
    """Read, update and delete one document."""

    def get(self, request, document_id):
        try:
            document = FulfillmentEngine.get(document_id)
        except StockError as exc:
            return _stock_error(exc)
        return JsonResponse(serialize_document(document))

    def put(self, request, document_id):
        submitted = None
        try:
            data = _payload(request)
            submitted = _lines(data)
            document = FulfillmentEngine.update(
                document_id,
                submitted,
                expected_version=_expected_version(request, data),
                user=_user(request),
                **_metadata(data),
            )
        except BadPayload as exc:
            return _bad_request(exc)
        except StockError as exc:
            return _stock_error(exc, submitted)

        return JsonResponse(serialize_document(document))

    def delete(self, request, document_id):
        try:
            restored = FulfillmentEngine.delete(
                document_id,
                expected_version=_expected_version(request, {}),
                user=_user(request),
            )
        except BadPayload as exc:
            return _bad_request(exc)
        except StockError as exc:
            return _stock_error(exc)

        return JsonResponse({'restored': restored})


@method_decorator(csrf_exempt, name='dispatch')
class DocumentApproveView(View):
    """Approve one document."""

    def post(self, request, document_id):
        try:
            document = FulfillmentEngine.approve(
                document_id,
                expected_version=_expected_version(request, {}),
                user=_user(request),
            )
        except BadPayload as exc:
            return _bad_request(exc)
        except StockError as exc:
            return _stock_error(exc)

        return JsonResponse({
            'document_id': document.document_id,
            'status': document.status,
            'version': document.version,
        })


@method_decorator(csrf_exempt, name='dispatch')
class DocumentTransmitView(View):
    """Credit an approved packing list to its destination store."""

    def post(self, request, document_id):
        try:
            data = _payload(request)
            document = FulfillmentEngine.transmit(
                document_id,
                destination_store=str(data.get('destination_store') or '') or None,
                prices=_prices(data),
                currency=_currency(data),
                expected_version=_expected_version(request, data),
                user=_user(request),
            )
        except BadPayload as exc:
            return _bad_request(exc)
        except StockError as exc:
            return _stock_error(exc)

        return JsonResponse(serialize_document(document))


class StockView(View):
    """Read stock of a store, or of one product at a store."""

    def get(self, request, store_code, product_id=None):
        if product_id is not None:
            entry = StockLedger.get(store_code, product_id)
            if entry is None:
                return _stock_error(StockError(
                    'UNKNOWN_STORE_OR_PRODUCT',
                    store_code=store_code,
                    product_id=product_id,
                ))
            return JsonResponse(serialize_entry(entry))

        include_empty = request.GET.get('include_empty', '1') not in ('0', 'false')
        entries = StockLedger.list_by_store(store_code, include_empty=include_empty)
        return JsonResponse({
            'store_code': store_code,
            'entries': [serialize_entry(entry) for entry in entries.iterator()],
        })
