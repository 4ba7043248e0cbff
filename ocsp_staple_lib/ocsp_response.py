# vim: autoindent tabstop=4 shiftwidth=4 expandtab softtabstop=4 filetype=python

# Stapled OCSP-response validation library
# Copyright (C) 2020 Jari Turkia
#
# This program is free software; you can redistribute it and/or modify it under
# the terms of the GNU General Public License version 2, as published by the
# Free Software Foundation
#
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE. See the GNU General Public License for more
# details (http://www.gnu.org/licenses/gpl.txt).

import threading
from OpenSSL import crypto  # pip3 install pyOpenSSL
from cryptography import (
    exceptions as crypto_exceptions,
    x509
)
from cryptography.x509 import ocsp
from cryptography.hazmat.primitives import serialization
from .basic_response import BasicResponse
from .trust_store import TrustStore
from .ocsp_text import OcspTextRenderer
from .ocsp_verify import basic_verify
from .exceptions import *


def load_ocsp_response(der_bytes, peer_cert_chain=()):
    """
    Decode a stapled OCSP-response and attach the peer certificate chain into it.
    This is the only way of getting an OcspResponse.
    :param der_bytes: DER-encoded OCSPResponse, RFC 6960 4.2.1
    :param peer_cert_chain: certificates presented by the peer in TLS-handshake, in order received
    :return: OcspResponse
    """
    if not isinstance(der_bytes, (bytes, bytearray, memoryview)):
        raise InvalidArgumentException("OCSP response must be bytes, not %s" % der_bytes.__class__.__name__)
    peer_cert_chain = tuple(peer_cert_chain)
    for cert in peer_cert_chain:
        if not isinstance(cert, x509.Certificate):
            raise InvalidArgumentException("Peer certificate chain can contain only X.509 certificates, not %s" %
                                           cert.__class__.__name__)

    try:
        ocsp_resp = ocsp.load_der_ocsp_response(bytes(der_bytes))
    except ValueError as exc:
        raise DecodeException("Cannot decode OCSP response: %s" % exc) from exc

    return OcspResponse._from_decoded(ocsp_resp, peer_cert_chain)


class OcspResponse:
    """
    OCSP-response stapled into a TLS-handshake, together with the peer certificate chain.
    Certificates of the chain are borrowed from the handshake, they're never modified.
    """

    # Failing to load trusted CA-certificates is an error.
    # On False, verification continues with whatever got loaded and will fail on certificate verify.
    trust_store_load_strict = True

    _ocsp_response = None
    _peer_cert_chain = None
    _lock = None

    def __init__(self, *args, **kwargs):
        raise NotConstructibleException(
            "Cannot directly create an OcspResponse object. Get it from load_ocsp_response().")

    @classmethod
    def _from_decoded(cls, ocsp_resp, peer_cert_chain):
        self = cls.__new__(cls)
        self._ocsp_response = ocsp_resp
        self._peer_cert_chain = peer_cert_chain
        self._lock = threading.Lock()

        return self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.dispose()

    def dispose(self):
        with self._lock:
            self._ocsp_response = None
            self._peer_cert_chain = None

    @property
    def disposed(self):
        return self._ocsp_response is None

    def _get_response(self):
        with self._lock:
            if self._ocsp_response is None:
                raise DisposedException("OCSP response has been disposed of!")
            return self._ocsp_response, self._peer_cert_chain

    @property
    def status(self):
        ocsp_resp, _peer_cert_chain = self._get_response()

        return ocsp_resp.response_status

    @property
    def peer_cert_chain(self):
        _ocsp_resp, peer_cert_chain = self._get_response()

        return peer_cert_chain

    def as_text(self):
        """
        Human-readable dump of the OCSP-response.
        An OCSP-response may contain non-UTF-8 characters (if there are certificates in it),
        decoding is left for the caller.
        :return: bytes
        """
        ocsp_resp, _peer_cert_chain = self._get_response()
        try:
            renderer = OcspTextRenderer()
            return renderer.render(ocsp_resp)
        except MemoryError as exc:
            raise OutOfMemoryException("Out of memory while printing OCSP response") from exc
        except (ValueError, KeyError, crypto.Error, crypto_exceptions.UnsupportedAlgorithm) as exc:
            raise TextRenderException("Could not print OCSP response: %s" % exc) from exc

    def as_der_bytes(self):
        ocsp_resp, _peer_cert_chain = self._get_response()
        try:
            return ocsp_resp.public_bytes(serialization.Encoding.DER)
        except ValueError as exc:
            raise EncodingException("Could not convert OCSP response to DER bytes") from exc

    def verify(self, ca_file, verbose=False):
        """
        Verify the OCSP-response is signed by an authority chaining up to trusted CA-certificates.
        Peer certificate chain is added into the response certificates for the chain building.
        :param ca_file: path to a file containing trusted CA-certificates
        :param verbose:
        :return: None, raises on failure
        """
        TrustStore.check_path(ca_file)
        ocsp_resp, peer_cert_chain = self._get_response()

        # Ensure the response that can be verified
        if ocsp_resp.response_status != ocsp.OCSPResponseStatus.SUCCESSFUL:
            raise NonSuccessfulStatusException(
                "Cannot verify an OCSP response with a non-successful status '%s'" %
                OcspTextRenderer.RESPONSE_STATUS_NAMES[ocsp_resp.response_status],
                status=ocsp_resp.response_status)

        with TrustStore() as trusted_cas:
            trusted_cas.load_locations(ca_file, strict=self.trust_store_load_strict, verbose=verbose)

            with BasicResponse.from_ocsp_response(ocsp_resp) as basic_resp:
                # Servers may leave the signer chain out of the response as the client has
                # seen it already in the handshake.
                for cert in peer_cert_chain:
                    basic_resp.add_cert(cert)

                verify_res, verify_error = basic_verify(basic_resp, trusted_cas, verbose=verbose)

        if verify_res <= 0:
            raise VerificationFailedException(verify_error.code, verify_error.reason, verify_error.message)

    def as_dict(self):
        """
        Fields of the OCSP-response.
        :return: dict
        """
        ocsp_resp, _peer_cert_chain = self._get_response()
        status = ocsp_resp.response_status
        ocsp_data = {
            'response_status': OcspTextRenderer.RESPONSE_STATUS_NAMES[status],
            'response_status_ok': status == ocsp.OCSPResponseStatus.SUCCESSFUL
        }
        if status != ocsp.OCSPResponseStatus.SUCCESSFUL:
            return ocsp_data

        responder_info = None
        if ocsp_resp.responder_name:
            responder_info = {}
            for responder_component in ocsp_resp.responder_name:
                responder_info[responder_component.oid._name] = responder_component.value

        responses = []
        for single in ocsp_resp.responses:
            try:
                hash_algorithm_name = single.hash_algorithm.name
            except crypto_exceptions.UnsupportedAlgorithm:
                hash_algorithm_name = None
            responses.append({
                'certificate_status': single.certificate_status.name,
                'hash_algorithm': hash_algorithm_name,
                'issuer_name_hash': single.issuer_name_hash,
                'issuer_key_hash': single.issuer_key_hash,
                'serial_number': single.serial_number,
                'revocation_time': single.revocation_time_utc,
                'revocation_reason': single.revocation_reason.value if single.revocation_reason else None,
                'this_update': single.this_update_utc,
                'next_update': single.next_update_utc
            })

        ocsp_data.update({
            'response_type': 'Basic OCSP Response',
            'version': 1,
            'responder_name': responder_info,
            'responder_key_hash': ocsp_resp.responder_key_hash,
            'produced_at': ocsp_resp.produced_at_utc,
            'responses': responses,
            'signature_algorithm': ocsp_resp.signature_algorithm_oid._name,
            'signature': ocsp_resp.signature,
            'certificates': ocsp_resp.certificates
        })

        return ocsp_data
