"""
Passkey (WebAuthn) ceremonies.

Thin wrapper over py_webauthn. The adapter never touches the database: it turns
stored state into ceremony options and checks signed responses, raising
PasskeyVerificationError with a human readable reason when a response is rejected.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from webauthn import (
    generate_authentication_options,
    generate_registration_options,
    options_to_json,
    verify_authentication_response,
    verify_registration_response,
)
from webauthn.helpers import base64url_to_bytes, bytes_to_base64url
from webauthn.helpers.exceptions import WebAuthnException
from webauthn.helpers.structs import (
    AttestationConveyancePreference,
    AuthenticatorSelectionCriteria,
    AuthenticatorTransport,
    PublicKeyCredentialDescriptor,
    ResidentKeyRequirement,
    UserVerificationRequirement,
)

from .config import get_settings

logger = logging.getLogger(__name__)


class PasskeyVerificationError(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass
class PasskeyCeremony:
    challenge: str  # base64url
    options: dict[str, Any]


@dataclass
class CredentialRef:
    id: str  # base64url credential id
    transports: list[str] = field(default_factory=list)


@dataclass
class RegisteredPasskey:
    credential_id: str
    public_key: str
    sign_count: int
    device_type: str | None
    backed_up: bool
    transports: list[str] = field(default_factory=list)


def _descriptors(refs: list[CredentialRef]) -> list[PublicKeyCredentialDescriptor]:
    descriptors = []
    for ref in refs:
        transports = []
        for value in ref.transports or []:
            try:
                transports.append(AuthenticatorTransport(value))
            except ValueError:
                logger.debug("Ignoring unknown transport hint %r on %s", value, ref.id)
        descriptors.append(
            PublicKeyCredentialDescriptor(id=base64url_to_bytes(ref.id), transports=transports or None)
        )
    return descriptors


class PasskeyAdapter:
    def __init__(self, rp_id: str | None = None, rp_name: str | None = None, expected_origin: str | None = None):
        settings = get_settings()
        self.rp_id = rp_id or settings.rp_id
        self.rp_name = rp_name or settings.rp_name
        self.expected_origin = expected_origin or settings.expected_origin

    def begin_registration(self, user_id: str, user_name: str, exclude: list[CredentialRef]) -> PasskeyCeremony:
        options = generate_registration_options(
            rp_id=self.rp_id,
            rp_name=self.rp_name,
            user_id=user_id.encode("utf-8"),
            user_name=user_name,
            user_display_name=user_name,
            attestation=AttestationConveyancePreference.NONE,
            authenticator_selection=AuthenticatorSelectionCriteria(
                resident_key=ResidentKeyRequirement.PREFERRED,
                user_verification=UserVerificationRequirement.PREFERRED,
            ),
            exclude_credentials=_descriptors(exclude),
        )
        return PasskeyCeremony(
            challenge=bytes_to_base64url(options.challenge),
            options=json.loads(options_to_json(options)),
        )

    def verify_registration(self, response: dict[str, Any], expected_challenge: str) -> RegisteredPasskey:
        try:
            verification = verify_registration_response(
                credential=response,
                expected_challenge=base64url_to_bytes(expected_challenge),
                expected_rp_id=self.rp_id,
                expected_origin=self.expected_origin,
            )
        except (WebAuthnException, ValueError, KeyError, TypeError) as exc:
            raise PasskeyVerificationError(str(exc) or "Verification failed") from exc

        transports = (response.get("response") or {}).get("transports") or []
        device_type = verification.credential_device_type
        return RegisteredPasskey(
            credential_id=bytes_to_base64url(verification.credential_id),
            public_key=bytes_to_base64url(verification.credential_public_key),
            sign_count=verification.sign_count,
            device_type=getattr(device_type, "value", device_type),
            backed_up=bool(verification.credential_backed_up),
            transports=[str(t) for t in transports],
        )

    def begin_authentication(self, allow: list[CredentialRef] | None = None) -> PasskeyCeremony:
        options = generate_authentication_options(
            rp_id=self.rp_id,
            allow_credentials=_descriptors(allow) if allow else None,
            user_verification=UserVerificationRequirement.PREFERRED,
        )
        return PasskeyCeremony(
            challenge=bytes_to_base64url(options.challenge),
            options=json.loads(options_to_json(options)),
        )

    def verify_authentication(
        self,
        response: dict[str, Any],
        expected_challenge: str,
        public_key: str,
        current_counter: int,
    ) -> int:
        """Returns the authenticator's new signature counter."""
        try:
            verification = verify_authentication_response(
                credential=response,
                expected_challenge=base64url_to_bytes(expected_challenge),
                expected_rp_id=self.rp_id,
                expected_origin=self.expected_origin,
                credential_public_key=base64url_to_bytes(public_key),
                credential_current_sign_count=current_counter,
            )
        except (WebAuthnException, ValueError, KeyError, TypeError) as exc:
            raise PasskeyVerificationError(str(exc) or "Verification failed") from exc
        return verification.new_sign_count
