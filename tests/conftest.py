"""
Shared test fixtures
"""

import logging

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from medledger import Identity, MedicalDeviceLedger


OWNER = "0x00000000000000000000000000000000000000a1"
MAKER = "0x00000000000000000000000000000000000000b2"
OTHER = "0x00000000000000000000000000000000000000c3"
FDA_BODY = "0x00000000000000000000000000000000000000d4"
CE_BODY = "0x00000000000000000000000000000000000000e5"


@pytest.fixture
def owner() -> Identity:
    return Identity(OWNER)


@pytest.fixture
def maker() -> Identity:
    return Identity(MAKER)


@pytest.fixture
def other() -> Identity:
    return Identity(OTHER)


@pytest.fixture
def fda_body() -> Identity:
    return Identity(FDA_BODY)


@pytest.fixture
def ce_body() -> Identity:
    return Identity(CE_BODY)


@pytest.fixture
def ledger(owner: Identity) -> MedicalDeviceLedger:
    return MedicalDeviceLedger(owner=owner)


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key) -> str:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


@pytest.fixture(scope="session")
def public_key_pem(rsa_private_key) -> str:
    return rsa_private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")


@pytest.fixture(autouse=True)
def package_logger():
    """Restore the package logger after tests that configure logging"""
    logger = logging.getLogger("medledger")
    saved_level, saved_handlers = logger.level, logger.handlers[:]
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(saved_level)
    for handler in saved_handlers:
        logger.addHandler(handler)
