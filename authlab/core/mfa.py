import base64
import io
import time

import pyotp
import qrcode

from .config import get_settings


class TotpAdapter:
    """RFC 6238 codes: 6 digits, 30 second step, one step of drift either way."""

    digits = 6
    interval = 30
    valid_window = 1

    def __init__(self, issuer: str | None = None):
        self.issuer = issuer or get_settings().totp_issuer

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval, issuer=self.issuer)

    def generate_secret(self) -> str:
        return pyotp.random_base32()

    def provisioning_uri(self, account_name: str, secret: str) -> str:
        return self._totp(secret).provisioning_uri(name=account_name, issuer_name=self.issuer)

    def current_code(self, secret: str) -> str:
        return self._totp(secret).now()

    def seconds_remaining(self) -> int:
        return self.interval - int(time.time()) % self.interval

    def verify(self, code: str, secret: str) -> bool:
        if not code or len(code) != self.digits or not (code.isascii() and code.isdigit()):
            return False
        # allow small window for clock skew
        return self._totp(secret).verify(code, valid_window=self.valid_window)


def qr_data_url(payload: str) -> str:
    img = qrcode.make(payload)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
