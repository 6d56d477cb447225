"""
Merchant order signing
"""

from payra.signers.signature_generator import ORDER_TYPES, SignatureGenerator

__all__ = ["ORDER_TYPES", "SignatureGenerator"]
