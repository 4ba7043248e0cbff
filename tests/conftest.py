# SPDX-License-Identifier: GPL-2.0

from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.x509 import ocsp
from cryptography.x509.oid import NameOID, ExtendedKeyUsageOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa


def _name(common_name):
    return x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, 'FI'),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, 'Test PKI'),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])


def _make_cert(common_name, key, issuer_cert=None, issuer_key=None, ca=False, ocsp_signing=False):
    now = datetime.now(timezone.utc)
    subject = _name(common_name)
    if issuer_cert is None:
        # Self-signed
        issuer_name = subject
        issuer_key = key
    else:
        issuer_name = issuer_cert.subject

    builder = x509.CertificateBuilder() \
        .subject_name(subject) \
        .issuer_name(issuer_name) \
        .public_key(key.public_key()) \
        .serial_number(x509.random_serial_number()) \
        .not_valid_before(now - timedelta(days=1)) \
        .not_valid_after(now + timedelta(days=30)) \
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True) \
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False) \
        .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_key.public_key()),
                       critical=False)
    if ca:
        builder = builder.add_extension(x509.KeyUsage(digital_signature=True, content_commitment=False,
                                                      key_encipherment=False, data_encipherment=False,
                                                      key_agreement=False, key_cert_sign=True, crl_sign=True,
                                                      encipher_only=False, decipher_only=False),
                                        critical=True)
    if ocsp_signing:
        builder = builder.add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.OCSP_SIGNING]), critical=False)

    return builder.sign(issuer_key, hashes.SHA256())


def generate_key(key_type):
    if key_type == 'rsa':
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)
    if key_type == 'ed25519':
        return ed25519.Ed25519PrivateKey.generate()
    if key_type == 'ed448':
        return ed448.Ed448PrivateKey.generate()

    return ec.generate_private_key(ec.SECP256R1())


def signing_hash(key):
    # EdDSA signs without a separate hash
    if isinstance(key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
        return None

    return hashes.SHA256()


class PKI:
    """
    Root CA -> Intermediate CA -> leaf
                               -> delegated OCSP responders (with and without id-kp-OCSPSigning,
                                  UTF-8 subject, RSA and EdDSA keys)
    Other root CA, unrelated to all of the above.
    """

    def __init__(self):
        self.root_key = ec.generate_private_key(ec.SECP256R1())
        self.root_cert = _make_cert('Test Root CA', self.root_key, ca=True)
        self.intermediate_key = ec.generate_private_key(ec.SECP256R1())
        self.intermediate_cert = _make_cert('Test Intermediate CA', self.intermediate_key,
                                            self.root_cert, self.root_key, ca=True)
        self.leaf_key = ec.generate_private_key(ec.SECP256R1())
        self.leaf_cert = _make_cert('www.example.com', self.leaf_key,
                                    self.intermediate_cert, self.intermediate_key)
        self.responder_key = ec.generate_private_key(ec.SECP256R1())
        self.responder_cert = _make_cert('Test OCSP Responder', self.responder_key,
                                         self.intermediate_cert, self.intermediate_key, ocsp_signing=True)
        self.rogue_responder_cert = _make_cert('Test Rogue Responder', self.responder_key,
                                               self.intermediate_cert, self.intermediate_key)
        self.other_root_key = ec.generate_private_key(ec.SECP256R1())
        self.other_root_cert = _make_cert('Other Root CA', self.other_root_key, ca=True)
        # Subject is UTF-8, not plain ASCII
        self.utf8_responder_cert = _make_cert('Testivastaaja Öljynporauslautta', self.responder_key,
                                              self.intermediate_cert, self.intermediate_key, ocsp_signing=True)
        self._responders = {}

    def responder_for(self, key_type):
        """Delegated OCSP responder issued by the intermediate CA, having a key of given type."""
        if key_type not in self._responders:
            key = generate_key(key_type)
            cert = _make_cert('Test OCSP Responder %s' % key_type, key,
                              self.intermediate_cert, self.intermediate_key, ocsp_signing=True)
            self._responders[key_type] = (cert, key)

        return self._responders[key_type]

    def build_response(self, signer_cert=None, signer_key=None, certificates=None,
                       encoding=ocsp.OCSPResponderEncoding.HASH,
                       cert_status=ocsp.OCSPCertStatus.GOOD, revocation_reason=None,
                       subject_cert=None, issuer_cert=None):
        """
        DER-encoded successful OCSP-response. By default signed directly by the intermediate CA
        without any certificates in the response.
        """
        if signer_cert is None:
            signer_cert = self.intermediate_cert
        if signer_key is None:
            signer_key = self.intermediate_key
        if subject_cert is None:
            subject_cert = self.leaf_cert
        if issuer_cert is None:
            issuer_cert = self.intermediate_cert

        now = datetime.now(timezone.utc).replace(microsecond=0)
        revocation_time = None
        if cert_status == ocsp.OCSPCertStatus.REVOKED:
            revocation_time = now - timedelta(hours=1)

        builder = ocsp.OCSPResponseBuilder() \
            .add_response(cert=subject_cert, issuer=issuer_cert, algorithm=hashes.SHA1(),
                          cert_status=cert_status,
                          this_update=now - timedelta(minutes=5),
                          next_update=now + timedelta(days=7),
                          revocation_time=revocation_time,
                          revocation_reason=revocation_reason) \
            .responder_id(encoding, signer_cert)
        if certificates:
            builder = builder.certificates(certificates)
        response = builder.sign(signer_key, signing_hash(signer_key))

        return response.public_bytes(serialization.Encoding.DER)

    @staticmethod
    def replace_signature(der, signature):
        """Swap the signature of a DER-encoded response, lengths must match."""
        old_signature = ocsp.load_der_ocsp_response(der).signature
        assert len(signature) == len(old_signature)

        return der.replace(old_signature, signature)

    @staticmethod
    def build_unsuccessful_response(status):
        response = ocsp.OCSPResponseBuilder.build_unsuccessful(status)

        return response.public_bytes(serialization.Encoding.DER)


def _write_pem(path, *certs):
    with open(path, 'wb') as outfile:
        for cert in certs:
            outfile.write(cert.public_bytes(serialization.Encoding.PEM))

    return path


@pytest.fixture(scope='session')
def pki():
    return PKI()


@pytest.fixture
def ca_file(pki, tmp_path):
    return _write_pem(str(tmp_path / 'root-ca.pem'), pki.root_cert)


@pytest.fixture
def other_ca_file(pki, tmp_path):
    return _write_pem(str(tmp_path / 'other-ca.pem'), pki.other_root_cert)


@pytest.fixture
def chain_file(pki, tmp_path):
    return _write_pem(str(tmp_path / 'chain.pem'), pki.leaf_cert, pki.intermediate_cert)
