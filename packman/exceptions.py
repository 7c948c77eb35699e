"""
Exceptions for Packman.

All errors are StockError with a structured code for programmatic handling.
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Error carrying a machine-readable code, a message and context data.

    Subclasses provide ``_default_messages`` so callers only pass the code
    and the context:

        raise StockError('INSUFFICIENT_STOCK', available=5, requested=6)
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, data={self.data!r})"


class StockError(BaseError):
    """
    Structured exception for stock and fulfillment operations.

    Usage:
        try:
            fulfillment.create('loja-centro', [{'product_id': 'P1', 'quantity': 6}])
        except StockError as e:
            if e.code == 'LINES_REJECTED':
                for rejection in e.rejections:
                    print(rejection['product_id'], rejection['code'])
            elif e.retryable:
                ...  # concurrent writer won, try again

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'INVALID_QUANTITY': 'Quantidade inválida (deve ser positiva)',
        'INSUFFICIENT_STOCK': 'Quantidade solicitada indisponível',
        'DOCUMENT_IMMUTABLE': 'Documento aprovado não pode ser alterado',
        'DOCUMENT_NOT_FOUND': 'Documento não encontrado',
        'UNKNOWN_STORE_OR_PRODUCT': 'Loja ou produto desconhecido',
        'CONCURRENT_CONFLICT': 'Modificação concorrente detectada',
        'LINES_REJECTED': 'Um ou mais itens foram rejeitados',
        'REASON_REQUIRED': 'Motivo é obrigatório',
        'DOCUMENT_NOT_TRANSMITTABLE': 'Somente romaneios aprovados podem ser transmitidos',
        'DOCUMENT_ALREADY_TRANSMITTED': 'Documento já foi transmitido',
        'INVALID_STORE': 'Loja não pode participar desta movimentação',
        'INVALID_PRICE': 'Preço inválido',
    }

    @property
    def retryable(self) -> bool:
        """Only lost races are safe to retry without asking the user."""
        return self.code == 'CONCURRENT_CONFLICT'

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)

    @property
    def rejections(self) -> list[dict[str, Any]]:
        """Shortcut for data['rejections'] (one dict per rejected line)."""
        return self.data.get('rejections', [])

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }
