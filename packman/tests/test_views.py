"""
Tests for the JSON views.
"""

import json

import pytest
from django.urls import reverse

from packman import fulfillment, stock
from packman.models import Document


pytestmark = pytest.mark.django_db


def post_json(client, url, data, **kwargs):
    return client.post(url, data=json.dumps(data), content_type='application/json', **kwargs)


def put_json(client, url, data, **kwargs):
    return client.put(url, data=json.dumps(data), content_type='application/json', **kwargs)


class TestDocumentCreateView:
    """POST documents/"""

    def test_create(self, client, p1, store, on_hand):
        response = post_json(client, reverse('packman:document-list'), {
            'source_store': store,
            'lines': [{'product_id': 'P1', 'quantity': 4}],
            'number': 'BOX-7',
            'metadata': {'truck': 'KA-01'},
        })

        assert response.status_code == 201
        body = response.json()
        assert body['status'] == 'draft'
        assert body['version'] == 1
        assert body['number'] == 'BOX-7'
        assert body['metadata'] == {'truck': 'KA-01'}
        assert body['lines'] == [
            {'product_id': 'P1', 'quantity': 4, 'unit_price': '25.00', 'description': ''},
        ]
        assert on_hand(store, 'P1') == 6

    def test_create_rejected_lines(self, client, p1, p2, store):
        """422 echoes every submitted line with its rejection."""
        response = post_json(client, reverse('packman:document-list'), {
            'source_store': store,
            'lines': [
                {'product_id': 'P1', 'quantity': 4},
                {'product_id': 'P2', 'quantity': 6},
            ],
        })

        assert response.status_code == 422
        body = response.json()
        assert body['code'] == 'LINES_REJECTED'
        assert body['retryable'] is False
        assert body['lines'] == [
            {'product_id': 'P1', 'quantity': 4},
            {'product_id': 'P2', 'quantity': 6, 'rejected': 'INSUFFICIENT_STOCK', 'available': 5},
        ]
        assert not Document.objects.exists()

    def test_create_requires_source_store(self, client):
        response = post_json(client, reverse('packman:document-list'), {'lines': []})

        assert response.status_code == 400
        assert response.json()['code'] == 'BAD_REQUEST'

    def test_create_invalid_json(self, client):
        response = client.post(
            reverse('packman:document-list'), data='{not json', content_type='application/json'
        )

        assert response.status_code == 400

    def test_create_invalid_kind(self, client, store):
        response = post_json(client, reverse('packman:document-list'), {
            'source_store': store, 'kind': 'receipt', 'lines': [],
        })

        assert response.status_code == 400

    def test_create_invalid_date(self, client, store):
        response = post_json(client, reverse('packman:document-list'), {
            'source_store': store, 'document_date': '01/05/2024', 'lines': [],
        })

        assert response.status_code == 400

    @pytest.mark.parametrize('document_date', ['2024-02-30', 20240101, ['2024-05-01']])
    def test_create_unusable_date(self, client, store, document_date):
        """Impossible dates and non-string values are bad requests, not errors."""
        response = post_json(client, reverse('packman:document-list'), {
            'source_store': store, 'document_date': document_date, 'lines': [],
        })

        assert response.status_code == 400
        assert response.json()['code'] == 'BAD_REQUEST'
        assert not Document.objects.exists()

    def test_create_numeric_product_id_echoed(self, client, p1, store):
        """A product id of 0 is echoed as '0', like any other id."""
        response = post_json(client, reverse('packman:document-list'), {
            'source_store': store,
            'lines': [{'product_id': 0, 'quantity': 1}, {'product_id': 'P1', 'quantity': 1}],
        })

        assert response.status_code == 422
        assert response.json()['lines'] == [
            {'product_id': '0', 'quantity': 1, 'rejected': 'UNKNOWN_STORE_OR_PRODUCT'},
            {'product_id': 'P1', 'quantity': 1},
        ]

    def test_create_reserved_metadata_key(self, client, store):
        response = post_json(client, reverse('packman:document-list'), {
            'source_store': store, 'lines': [], 'metadata': {'user': 'x'},
        })

        assert response.status_code == 400

    def test_create_records_logged_in_user(self, client, p1, store, user):
        client.force_login(user)

        response = post_json(client, reverse('packman:document-list'), {
            'source_store': store, 'lines': [{'product_id': 'P1', 'quantity': 1}],
        })

        assert Document.objects.get(pk=response.json()['id']).created_by == user


class TestDocumentDetailView:
    """GET/PUT/DELETE documents/<id>/"""

    def test_get(self, client, p1, store):
        doc = fulfillment.create(store, [{'product_id': 'P1', 'quantity': 2}])

        response = client.get(reverse('packman:document-detail', args=[doc.pk]))

        assert response.status_code == 200
        assert response.json()['document_id'] == doc.document_id

    def test_get_not_found(self, client):
        response = client.get(reverse('packman:document-detail', args=[404]))

        assert response.status_code == 404
        assert response.json()['code'] == 'DOCUMENT_NOT_FOUND'

    def test_put(self, client, p1, store, on_hand):
        doc = fulfillment.create(store, [{'product_id': 'P1', 'quantity': 4}])

        response = put_json(
            client,
            reverse('packman:document-detail', args=[doc.pk]),
            {'lines': [{'product_id': 'P1', 'quantity': 7}]},
            headers={'If-Match': '1'},
        )

        assert response.status_code == 200
        assert response.json()['version'] == 2
        assert on_hand(store, 'P1') == 3

    def test_put_stale_version(self, client, p1, store):
        doc = fulfillment.create(store, [{'product_id': 'P1', 'quantity': 4}])

        response = put_json(
            client,
            reverse('packman:document-detail', args=[doc.pk]),
            {'lines': [{'product_id': 'P1', 'quantity': 7}], 'version': 3},
        )

        assert response.status_code == 409
        body = response.json()
        assert body['code'] == 'CONCURRENT_CONFLICT'
        assert body['retryable'] is True

    def test_put_approved(self, client, p1, store):
        doc = fulfillment.create(store, [{'product_id': 'P1', 'quantity': 4}])
        fulfillment.approve(doc.pk)

        response = put_json(
            client,
            reverse('packman:document-detail', args=[doc.pk]),
            {'lines': []},
        )

        assert response.status_code == 409
        assert response.json()['code'] == 'DOCUMENT_IMMUTABLE'

    def test_delete(self, client, p1, store, on_hand):
        doc = fulfillment.create(store, [{'product_id': 'P1', 'quantity': 4}])

        response = client.delete(reverse('packman:document-detail', args=[doc.pk]))

        assert response.status_code == 200
        assert response.json() == {'restored': [{'product_id': 'P1', 'quantity': 4}]}
        assert on_hand(store, 'P1') == 10


class TestDocumentApproveView:
    """POST documents/<id>/approve/"""

    def test_approve(self, client, p1, store):
        doc = fulfillment.create(store, [{'product_id': 'P1', 'quantity': 1}])

        response = client.post(reverse('packman:document-approve', args=[doc.pk]))

        assert response.status_code == 200
        assert response.json() == {
            'document_id': doc.document_id,
            'status': 'approved',
            'version': 2,
        }

    def test_approve_twice(self, client, p1, store):
        doc = fulfillment.create(store, [{'product_id': 'P1', 'quantity': 1}])
        client.post(reverse('packman:document-approve', args=[doc.pk]))

        response = client.post(reverse('packman:document-approve', args=[doc.pk]))

        assert response.status_code == 409


class TestDocumentTransmitView:
    """POST documents/<id>/transmit/"""

    @pytest.fixture
    def approved(self, p1, store, other_store):
        doc = fulfillment.create(
            store, [{'product_id': 'P1', 'quantity': 4}], destination_store=other_store,
        )
        return fulfillment.approve(doc.pk)

    def test_transmit(self, client, approved, other_store, on_hand):
        response = post_json(client, reverse('packman:document-transmit', args=[approved.pk]), {
            'prices': {'P1': '30.00'}, 'currency': 'aed', 'version': 2,
        })

        assert response.status_code == 200
        body = response.json()
        assert body['status'] == 'approved'
        assert body['version'] == 3
        assert body['destination_store'] == other_store
        assert body['transmitted_at'] is not None
        assert on_hand(other_store, 'P1') == 4
        assert stock.get(other_store, 'P1').currency == 'AED'

    def test_transmit_twice(self, client, approved, other_store, on_hand):
        url = reverse('packman:document-transmit', args=[approved.pk])
        post_json(client, url, {})

        response = post_json(client, url, {})

        assert response.status_code == 409
        assert response.json()['code'] == 'DOCUMENT_ALREADY_TRANSMITTED'
        assert on_hand(other_store, 'P1') == 4

    def test_transmit_draft(self, client, p1, store, other_store):
        doc = fulfillment.create(
            store, [{'product_id': 'P1', 'quantity': 1}], destination_store=other_store,
        )

        response = post_json(client, reverse('packman:document-transmit', args=[doc.pk]), {})

        assert response.status_code == 409
        assert response.json()['code'] == 'DOCUMENT_NOT_TRANSMITTABLE'

    def test_transmit_rejected_price(self, client, approved):
        response = post_json(client, reverse('packman:document-transmit', args=[approved.pk]), {
            'prices': {'P1': '-5'},
        })

        assert response.status_code == 422
        assert response.json()['code'] == 'LINES_REJECTED'

    def test_transmit_to_source_store(self, client, approved, store):
        response = post_json(client, reverse('packman:document-transmit', args=[approved.pk]), {
            'destination_store': store,
        })

        assert response.status_code == 422
        assert response.json()['code'] == 'INVALID_STORE'

    @pytest.mark.parametrize('payload', [
        {'prices': ['30.00']},
        {'currency': 'dirham'},
        {'currency': 7},
    ])
    def test_transmit_bad_payload(self, client, approved, payload):
        response = post_json(
            client, reverse('packman:document-transmit', args=[approved.pk]), payload,
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'BAD_REQUEST'


class TestStockView:
    """GET stock/<store>/[<product>/]"""

    def test_entry(self, client, p1, store):
        response = client.get(reverse('packman:stock-entry', args=[store, 'P1']))

        assert response.status_code == 200
        body = response.json()
        assert body['quantity'] == 10
        assert body['unit_price'] == '25.00'
        assert body['currency'] == 'INR'

    def test_entry_unknown(self, client, store):
        response = client.get(reverse('packman:stock-entry', args=[store, 'P1']))

        assert response.status_code == 422
        assert response.json()['code'] == 'UNKNOWN_STORE_OR_PRODUCT'

    def test_store_listing(self, client, p1, p2, store):
        fulfillment.create(store, [{'product_id': 'P2', 'quantity': 5}])

        response = client.get(reverse('packman:stock-store', args=[store]))
        assert [e['product_id'] for e in response.json()['entries']] == ['P1', 'P2']

        response = client.get(reverse('packman:stock-store', args=[store]), {'include_empty': '0'})
        assert [e['product_id'] for e in response.json()['entries']] == ['P1']
