"""
Self-signed TLS material for --https.
A new key and certificate are generated on every start; nothing is kept between runs.
"""

import ipaddress
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from hoxy.config import CERT_COMMON_NAME, CERT_VALID_DAYS

logger = logging.getLogger(__name__)

KEY_FILENAME = "key.pem"
CERT_FILENAME = "cert.pem"


@dataclass(frozen=True)
class TLSMaterial:
    key_pem: bytes
    cert_pem: bytes

    def write_to(self, directory: Path) -> tuple[Path, Path]:
        """Write key and cert into directory; returns (keyfile, certfile)."""
        key_path = directory / KEY_FILENAME
        cert_path = directory / CERT_FILENAME
        key_path.write_bytes(self.key_pem)
        key_path.chmod(0o600)
        cert_path.write_bytes(self.cert_pem)
        return key_path, cert_path


def generate_self_signed(common_name: str = CERT_COMMON_NAME, days: int = CERT_VALID_DAYS) -> TLSMaterial:
    """RSA-2048 key plus a self-signed certificate for common_name, valid for `days` days."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)

    san = x509.SubjectAlternativeName([
        x509.DNSName(common_name),
        x509.IPAddress(ipaddress.IPv4Address("127.0.0.1")),
        x509.IPAddress(ipaddress.IPv6Address("::1")),
    ])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=days))
        .add_extension(san, critical=False)
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .sign(private_key=key, algorithm=hashes.SHA256())
    )
    logger.debug("Generated self-signed certificate for %s valid %d days", common_name, days)

    return TLSMaterial(
        key_pem=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        cert_pem=cert.public_bytes(serialization.Encoding.PEM),
    )
