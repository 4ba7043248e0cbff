# vim: autoindent tabstop=4 shiftwidth=4 expandtab softtabstop=4 filetype=python

# SPDX-License-Identifier: GPL-2.0

# OCSP basic response verification, RFC 6960 3.2 and 4.2.2.2.
# Return convention of the verifier:
#    1: response verifies
#    0: signature or signer path does not verify
#   <0: internal or operational error

from collections import namedtuple
from OpenSSL import crypto  # pip3 install pyOpenSSL
from cryptography import exceptions as crypto_exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.x509 import (
    extensions as x509_extensions,
    oid as x509_oid
)
from .basic_response import public_key_bits
from .crypto_signature import CryptoSignature
from .exceptions import *

# Reason codes, numbered as in OpenSSL ocsperr.h
OCSP_R_CERTIFICATE_VERIFY_ERROR = 101
OCSP_R_MISSING_OCSPSIGNING_USAGE = 103
OCSP_R_NO_CERTIFICATES_IN_CHAIN = 105
OCSP_R_RESPONSE_CONTAINS_NO_REVOCATION_DATA = 108
OCSP_R_ROOT_CA_NOT_TRUSTED = 112
OCSP_R_SIGNATURE_FAILURE = 117
OCSP_R_SIGNER_CERTIFICATE_NOT_FOUND = 118
OCSP_R_UNKNOWN_MESSAGE_DIGEST = 119

REASON_STRINGS = {
    OCSP_R_CERTIFICATE_VERIFY_ERROR: 'certificate verify error',
    OCSP_R_MISSING_OCSPSIGNING_USAGE: 'missing ocspsigning usage',
    OCSP_R_NO_CERTIFICATES_IN_CHAIN: 'no certificates in chain',
    OCSP_R_RESPONSE_CONTAINS_NO_REVOCATION_DATA: 'response contains no revocation data',
    OCSP_R_ROOT_CA_NOT_TRUSTED: 'root ca not trusted',
    OCSP_R_SIGNATURE_FAILURE: 'signature failure',
    OCSP_R_SIGNER_CERTIFICATE_NOT_FOUND: 'signer certificate not found',
    OCSP_R_UNKNOWN_MESSAGE_DIGEST: 'unknown message digest',
}

VerifyError = namedtuple('VerifyError', ['code', 'reason', 'message'])


def _error(code, message=None):
    return VerifyError(code, REASON_STRINGS[code], message)


def basic_verify(basic_resp, trust_store, verbose=False):
    """
    Verify the signature of a basic OCSP-response and authority of its signer.
    Signer is looked up from the certificate pool of the response, which is also used
    as untrusted material for building the chain up to the trust store.
    :param basic_resp: BasicResponse
    :param trust_store: TrustStore
    :param verbose:
    :return: tuple (result, VerifyError or None)
    """
    signer = basic_resp.find_signer()
    if signer is None:
        return 0, _error(OCSP_R_SIGNER_CERTIFICATE_NOT_FOUND)

    # Response verify 1:
    # The signature on the response is valid.
    try:
        signature_verifies_ok = CryptoSignature.verify_signature(signer.public_key(),
                                                                 basic_resp.signature,
                                                                 basic_resp.tbs_response_bytes,
                                                                 basic_resp.signature_hash_algorithm,
                                                                 basic_resp.signature_algorithm_oid)
    except (UnsupportedPublicKeyAlgorithmException, crypto_exceptions.UnsupportedAlgorithm) as exc:
        return -1, _error(OCSP_R_SIGNATURE_FAILURE, str(exc))
    if not signature_verifies_ok:
        return 0, _error(OCSP_R_SIGNATURE_FAILURE)

    # Response verify 2:
    # Signer certificate chains up to a trusted CA.
    untrusted = [crypto.X509.from_cryptography(cert) for cert in basic_resp.certificates]
    store_ctx = crypto.X509StoreContext(trust_store.store, crypto.X509.from_cryptography(signer), untrusted)
    try:
        chain = [cert.to_cryptography() for cert in store_ctx.get_verified_chain()]
    except crypto.X509StoreContextError as exc:
        if verbose:
            print("Warning! Signer certificate %s does not verify: %s" % (signer.subject.rfc4514_string(), exc))
        verify_error_code = exc.errors[0] if exc.errors else None
        return 0, VerifyError(OCSP_R_CERTIFICATE_VERIFY_ERROR,
                              REASON_STRINGS[OCSP_R_CERTIFICATE_VERIFY_ERROR],
                              "Verify error:%s (%s)" % (exc, verify_error_code))

    # Response verify 3:
    # The signer is authorized to sign the response.
    try:
        result, error = check_issuer(basic_resp.responses, chain)
    except crypto_exceptions.UnsupportedAlgorithm as exc:
        # Certificate ID hashed with an algorithm not known to us
        return -1, _error(OCSP_R_UNKNOWN_MESSAGE_DIGEST, str(exc))
    if result != 0:
        return result, error

    # Not authorized by issuer. Only explicit OCSP-signing trust of the root CA would do,
    # a plain PEM trust store does not carry trust settings.
    if verbose:
        print("Warning! Signer %s is not authorized to sign the OCSP response" % signer.subject.rfc4514_string())

    return 0, error or _error(OCSP_R_ROOT_CA_NOT_TRUSTED)


def check_issuer(responses, chain):
    """
    RFC 6960, 4.2.2.2. Authorized Responders
    The signer is either the CA that issued the certificates in question, or
    is issued by that CA and includes id-kp-OCSPSigning in its extended key usage.
    :param responses: single responses of the OCSP-response
    :param chain: verified signer chain, signer first
    :return: tuple (result, VerifyError or None)
    """
    if not chain:
        return -1, _error(OCSP_R_NO_CERTIFICATES_IN_CHAIN)

    result, cert_id = _check_ids(responses)
    if result < 0:
        return result, _error(OCSP_R_RESPONSE_CONTAINS_NO_REVOCATION_DATA)
    if result == 0:
        return 0, None

    signer = chain[0]
    if len(chain) > 1:
        signer_ca = chain[1]
        if match_issuer_id(signer_ca, cert_id, responses):
            # Delegated responder
            if has_ocsp_signing_usage(signer):
                return 1, None
            return 0, _error(OCSP_R_MISSING_OCSPSIGNING_USAGE)

    # Otherwise the response is signed directly by the CA
    if match_issuer_id(signer, cert_id, responses):
        return 1, None

    return 0, None


def _check_ids(responses):
    """
    All single responses need to share the issuer.
    :return: 1 and the shared certificate ID, 2 and None if hash algorithms differ,
             0 on issuer mismatch and -1 on no responses
    """
    if not responses:
        return -1, None

    cert_id = responses[0]
    for single in responses[1:]:
        if _same_issuer(cert_id, single):
            continue
        if single.hash_algorithm.name != cert_id.hash_algorithm.name:
            # Needs to be matched one at a time.
            return 2, None
        return 0, None

    return 1, cert_id


def _same_issuer(cert_id, other):
    return cert_id.hash_algorithm.name == other.hash_algorithm.name and \
           cert_id.issuer_name_hash == other.issuer_name_hash and \
           cert_id.issuer_key_hash == other.issuer_key_hash


def match_issuer_id(cert, cert_id, responses):
    """
    Is cert the issuer identified in the certificate ID of a single response.
    With no certificate ID given, all of the responses must match.
    """
    if cert_id is None:
        for single in responses:
            if not match_issuer_id(cert, single, None):
                return False
        return True

    name_hash = hashes.Hash(cert_id.hash_algorithm)
    name_hash.update(cert.subject.public_bytes())
    if name_hash.finalize() != cert_id.issuer_name_hash:
        return False

    key_hash = hashes.Hash(cert_id.hash_algorithm)
    key_hash.update(public_key_bits(cert))
    if key_hash.finalize() != cert_id.issuer_key_hash:
        return False

    return True


def has_ocsp_signing_usage(cert):
    try:
        extended_key_usage_ext = cert.extensions.get_extension_for_class(x509_extensions.ExtendedKeyUsage)
    except x509_extensions.ExtensionNotFound:
        return False

    return x509_oid.ExtendedKeyUsageOID.OCSP_SIGNING in extended_key_usage_ext.value
