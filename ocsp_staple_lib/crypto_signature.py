# vim: autoindent tabstop=4 shiftwidth=4 expandtab softtabstop=4 filetype=python

# SPDX-License-Identifier: GPL-2.0

from cryptography import exceptions as crypto_exceptions
from cryptography.hazmat.primitives.asymmetric import (
    dsa,
    ec,
    ed25519,
    ed448,
    padding,
    rsa
)
from cryptography.x509 import oid as x509_oid
from .exceptions import *


class CryptoSignature:

    @staticmethod
    def verify_signature(public_key, signature, payload, hash_algorithm, signature_algorithm_oid=None):
        """
        Verify a signature made over payload.
        :param public_key: public key of the alleged signer
        :param signature: signature bytes
        :param payload: signed bytes, ie. TBS-part of an OCSP-response
        :param hash_algorithm: hash instance, None for Ed25519 and Ed448
        :param signature_algorithm_oid: needed to tell RSA-PSS apart from PKCS#1 v1.5
        :return: True on valid signature, False on mismatch
        """
        signature_verifies_ok = None

        if hash_algorithm is None and \
                not isinstance(public_key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
            raise UnsupportedPublicKeyAlgorithmException("No signature hash algorithm for key type: %s" %
                                                         public_key.__class__.__name__)

        if isinstance(public_key, rsa.RSAPublicKey):
            if signature_algorithm_oid == x509_oid.SignatureAlgorithmOID.RSASSA_PSS:
                rsa_padding = padding.PSS(
                    mgf=padding.MGF1(hash_algorithm),
                    salt_length=padding.PSS.AUTO
                )
            else:
                rsa_padding = padding.PKCS1v15()
            try:
                public_key.verify(
                    signature,
                    payload,
                    rsa_padding,
                    hash_algorithm,
                )
                signature_verifies_ok = True
            except crypto_exceptions.InvalidSignature:
                signature_verifies_ok = False
        elif isinstance(public_key, dsa.DSAPublicKey):
            try:
                public_key.verify(
                    signature,
                    payload,
                    hash_algorithm
                )
                signature_verifies_ok = True
            except crypto_exceptions.InvalidSignature:
                signature_verifies_ok = False
        elif isinstance(public_key, ec.EllipticCurvePublicKey):
            ecdsa_algorithm = ec.ECDSA(hash_algorithm)
            try:
                public_key.verify(
                    signature,
                    payload,
                    ecdsa_algorithm
                )
                signature_verifies_ok = True
            except crypto_exceptions.InvalidSignature:
                signature_verifies_ok = False
        elif isinstance(public_key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
            try:
                public_key.verify(
                    signature,
                    payload
                )
                signature_verifies_ok = True
            except crypto_exceptions.InvalidSignature:
                signature_verifies_ok = False
        else:
            raise UnsupportedPublicKeyAlgorithmException("Unsupported key type: %s" % public_key.__class__.__name__)

        return signature_verifies_ok
