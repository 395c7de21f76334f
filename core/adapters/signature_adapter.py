"""EOA wallet signature recovery (EIP-191 personal_sign messages)."""

from eth_account import Account
from eth_account.messages import encode_defunct

from ..errors import InvalidSignature


def recover_address(message: str, signature) -> str:
	"""
	Return the checksummed address that signed `message`.
	"""
	if not signature:
		raise InvalidSignature("Missing signature")
	try:
		return Account.recover_message(encode_defunct(text=message), signature=signature)
	except Exception as e:
		# eth_account raises a mix of ValueError/TypeError/BadSignature for malformed input
		raise InvalidSignature() from e


def verify_signature(address: str, message: str, signature) -> None:
	recovered = recover_address(message, signature)
	if recovered.lower() != (address or "").lower():
		raise InvalidSignature("Invalid signature.")
