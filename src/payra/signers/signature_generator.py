"""
SignatureGenerator - merchant signatures over Payra payment orders
"""

import logging
from typing import Any

from eth_account import Account
from eth_account.messages import encode_defunct

from payra.config import PayraConfig, normalize_network
from payra.encoding import AbiCodec, hex_to_bytes, keccak256
from payra.exceptions import (
    MissingCredentialsError,
    PayraError,
    SignatureCreationError,
    SignatureError,
    UnsupportedNetworkError,
)
from payra.types import SignatureResult

logger = logging.getLogger(__name__)

# The order and types MUST match what the Payra contract re-derives on-chain
ORDER_TYPES = ["address", "uint256", "string", "uint256", "uint256", "address"]

PERSONAL_SIGN_PREFIX = b"\x19Ethereum Signed Message:\n32"

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2


class SignatureGenerator:
    """
    Produces the 65-byte ECDSA signature a Payra contract verifies for payOrder.

    The signed value is keccak256 of the ABI-encoded tuple
    ``(address token, uint256 merchantId, string orderId, uint256 amount,
    uint256 timestamp, address payer)`` wrapped in the EIP-191 personal-sign
    prefix. Signing is deterministic (RFC 6979) and low-s.
    """

    def __init__(self, config: PayraConfig, codec: AbiCodec | None = None) -> None:
        self._config = config
        self._codec = codec or AbiCodec()

    def build_message_hash(
        self,
        token_address: str,
        merchant_id: int,
        order_id: str,
        amount_wei: int | str,
        timestamp: int,
        payer_address: str,
    ) -> bytes:
        """keccak256 of the ABI-encoded order tuple"""
        encoded = self._codec.encode(
            ORDER_TYPES,
            [token_address, merchant_id, order_id, amount_wei, timestamp, payer_address],
        )
        return keccak256(encoded)

    @staticmethod
    def build_signed_hash(message_hash: bytes) -> bytes:
        """keccak256("\\x19Ethereum Signed Message:\\n32" ++ message_hash)"""
        if len(message_hash) != 32:
            raise SignatureError(f"Message hash must be 32 bytes, got {len(message_hash)}")
        return keccak256(PERSONAL_SIGN_PREFIX + message_hash)

    def generate_signature(
        self,
        network: str,
        token_address: str,
        order_id: str,
        amount_wei: int | str,
        timestamp: int,
        payer_address: str,
    ) -> str:
        """
        Generate the signature for a Payra payOrder transaction.

        Args:
            network: Network name (e.g. "polygon")
            token_address: ERC-20 token address
            order_id: Merchant order identifier (e.g. "order_19_984723")
            amount_wei: Amount in the token's smallest unit (e.g. "13360000")
            timestamp: Unix timestamp of the order
            payer_address: Payer wallet address

        Returns:
            "0x" + r (32 bytes) + s (32 bytes) + v (1 byte) as hex

        Raises:
            MissingCredentialsError: No private key or merchant id for the network
            SignatureCreationError: Encoding, hashing or signing failed
        """
        merchant_id, private_key = self._credentials(network)

        try:
            message_hash = self.build_message_hash(
                token_address, merchant_id, order_id, amount_wei, timestamp, payer_address
            )
            signable = encode_defunct(primitive=message_hash)
            signed = Account.sign_message(signable, private_key=_normalize_key(private_key))
        except Exception as e:
            logger.error("Error generating Payra signature: %s", e)
            raise SignatureCreationError(f"Failed to generate signature: {e}") from e

        r, s, v = int(signed.r), int(signed.s), int(signed.v)
        if s > SECP256K1_HALF_N or v not in (27, 28):
            raise SignatureCreationError("Non-canonical signature produced")

        return "0x" + r.to_bytes(32, "big").hex() + s.to_bytes(32, "big").hex() + f"{v:02x}"

    def sign_order(self, network: str, **order: Any) -> SignatureResult:
        """Envelope variant of generate_signature: never raises PayraError"""
        try:
            signature = self.generate_signature(network, **order)
        except PayraError as e:
            logger.warning("Signature generation failed for %s: %s", network, e)
            return SignatureResult(success=False, error=str(e))
        return SignatureResult(success=True, signature=signature)

    def recover_signer(
        self,
        network: str,
        token_address: str,
        order_id: str,
        amount_wei: int | str,
        timestamp: int,
        payer_address: str,
        signature: str,
    ) -> str:
        """Recover the address that produced ``signature`` over the given order"""
        merchant_id = self._config.network(network).merchant_id
        if merchant_id is None:
            raise MissingCredentialsError(normalize_network(network))

        message_hash = self.build_message_hash(
            token_address, merchant_id, order_id, amount_wei, timestamp, payer_address
        )
        try:
            return Account.recover_message(
                encode_defunct(primitive=message_hash), signature=hex_to_bytes(signature)
            )
        except Exception as e:
            raise SignatureError(f"Failed to recover signer: {e}") from e

    def verify_signature(self, network: str, signature: str, **order: Any) -> bool:
        """True if ``signature`` was made by the network's merchant key over ``order``"""
        try:
            _, private_key = self._credentials(network)
            expected = Account.from_key(_normalize_key(private_key)).address
            recovered = self.recover_signer(network, signature=signature, **order)
        except Exception as e:
            logger.debug("Signature verification failed: %s", e)
            return False
        return recovered.lower() == expected.lower()

    def _credentials(self, network: str) -> tuple[int, str]:
        try:
            settings = self._config.network(network)
        except UnsupportedNetworkError as e:
            raise MissingCredentialsError(normalize_network(network)) from e
        return settings.require_signing()


def _normalize_key(private_key: str) -> str:
    private_key = private_key.strip()
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return private_key
