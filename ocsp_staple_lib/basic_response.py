# vim: autoindent tabstop=4 shiftwidth=4 expandtab softtabstop=4 filetype=python

# SPDX-License-Identifier: GPL-2.0

from cryptography import exceptions as crypto_exceptions
from cryptography.x509 import ocsp
from cryptography.hazmat.primitives import (
    serialization,
    hashes
)
from pyasn1.codec.ber import decoder as asn1_decoder


def public_key_bits(cert):
    """
    Contents of the subjectPublicKey BIT STRING of a certificate.
    This is what OCSP key hashes are calculated from.
    """
    cert_key = cert.public_key().public_bytes(encoding=serialization.Encoding.DER,
                                              format=serialization.PublicFormat.SubjectPublicKeyInfo
                                              )
    cert_key_asn1, _remainder = asn1_decoder.decode(cert_key)

    return cert_key_asn1[1].asOctets()


def public_key_hash(cert, hash_algorithm=None):
    if hash_algorithm is None:
        hash_algorithm = hashes.SHA1()
    key_hash = hashes.Hash(hash_algorithm)
    key_hash.update(public_key_bits(cert))

    return key_hash.finalize()


class BasicResponse:
    """
    The signed envelope of a successful OCSP-response.
    Certificate pool is mutable: certificates can be added to it for signer lookup and chain building.
    """
    tbs_response_bytes = None
    signature = None
    signature_algorithm_oid = None
    signature_hash_algorithm = None
    responder_name = None
    responder_key_hash = None
    responses = None
    certificates = None

    def __init__(self, tbs_response_bytes, signature, signature_algorithm_oid, signature_hash_algorithm,
                 responder_name, responder_key_hash, responses, certificates):
        self.tbs_response_bytes = tbs_response_bytes
        self.signature = signature
        self.signature_algorithm_oid = signature_algorithm_oid
        self.signature_hash_algorithm = signature_hash_algorithm
        self.responder_name = responder_name
        self.responder_key_hash = responder_key_hash
        self.responses = list(responses)
        self.certificates = list(certificates)

    @classmethod
    def from_ocsp_response(cls, ocsp_resp):
        if ocsp_resp.response_status != ocsp.OCSPResponseStatus.SUCCESSFUL:
            raise ValueError("OCSP response status '%s' has no basic response" % ocsp_resp.response_status.name)

        try:
            signature_hash_algorithm = ocsp_resp.signature_hash_algorithm
        except crypto_exceptions.UnsupportedAlgorithm:
            # Left for the signature verification to reject
            signature_hash_algorithm = None

        return cls(ocsp_resp.tbs_response_bytes,
                   ocsp_resp.signature,
                   ocsp_resp.signature_algorithm_oid,
                   signature_hash_algorithm,
                   ocsp_resp.responder_name,
                   ocsp_resp.responder_key_hash,
                   ocsp_resp.responses,
                   ocsp_resp.certificates)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def add_cert(self, cert):
        # No de-duplication. Order of additions is retained.
        self.certificates.append(cert)

    def find_signer(self):
        """
        Locate the certificate matching responder ID from the certificate pool.
        :return: certificate or None
        """
        for cert in self.certificates:
            if self._is_responder(cert):
                return cert

        return None

    def _is_responder(self, cert):
        if self.responder_name is not None:
            return cert.subject == self.responder_name

        # Key hash is always SHA-1, RFC 6960 4.2.1
        if not self.responder_key_hash or len(self.responder_key_hash) != 20:
            return False

        return public_key_hash(cert) == self.responder_key_hash

    def close(self):
        self.certificates = None
        self.responses = None
