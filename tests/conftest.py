from __future__ import annotations

import ipaddress
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from core.domain.models import ServerConfig

PAGE = """<!doctype html>
<html>
  <head><title>Test Deploy</title></head>
  <body><h1>hello</h1></body>
</html>
"""

CSS = "body { color: #102a43; }\n"
SECRET = "top secret, never served\n"


@pytest.fixture
def ui_tree(tmp_path: Path) -> SimpleNamespace:
    root = tmp_path / "ui"
    html_dir = root / "html"
    static = root / "static"
    (static / "css").mkdir(parents=True)
    html_dir.mkdir(parents=True)

    template = html_dir / "index.html"
    template.write_text(PAGE, encoding="utf-8")
    (static / "css" / "site.css").write_text(CSS, encoding="utf-8")
    (static / "logo.bin").write_bytes(bytes(range(256)))

    secret = root / "secret.txt"
    secret.write_text(SECRET, encoding="utf-8")

    return SimpleNamespace(root=root, template=template, static=static, secret=secret)


@pytest.fixture(scope="session")
def tls_material(tmp_path_factory: pytest.TempPathFactory) -> SimpleNamespace:
    """Certificado autofirmado para localhost/127.0.0.1."""

    directory = tmp_path_factory.mktemp("tls")
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    not_before = datetime.now(timezone.utc) - timedelta(minutes=5)

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_before + timedelta(days=1))
        .add_extension(
            x509.SubjectAlternativeName(
                [x509.DNSName("localhost"), x509.IPAddress(ipaddress.ip_address("127.0.0.1"))]
            ),
            critical=False,
        )
        .sign(key, hashes.SHA256())
    )

    cert_file = directory / "cert.pem"
    key_file = directory / "key.pem"
    cert_file.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_file.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return SimpleNamespace(cert=cert_file, key=key_file)


@pytest.fixture
def plain_config(ui_tree: SimpleNamespace) -> ServerConfig:
    return ServerConfig(
        address="127.0.0.1:0",
        host="127.0.0.1",
        port=0,
        tls_enabled=False,
        template_path=ui_tree.template,
        static_dir=ui_tree.static,
        shutdown_grace=5.0,
        access_log=False,
    )


@pytest.fixture
def tls_config(ui_tree: SimpleNamespace, tls_material: SimpleNamespace) -> ServerConfig:
    return ServerConfig(
        address="127.0.0.1:0",
        host="127.0.0.1",
        port=0,
        tls_enabled=True,
        cert_file=tls_material.cert,
        key_file=tls_material.key,
        template_path=ui_tree.template,
        static_dir=ui_tree.static,
        shutdown_grace=5.0,
        access_log=False,
    )
