# vim: autoindent tabstop=4 shiftwidth=4 expandtab softtabstop=4 filetype=python

# SPDX-License-Identifier: GPL-2.0

import io
from OpenSSL import crypto  # pip3 install pyOpenSSL
from cryptography import x509
from cryptography.x509 import ocsp
from cryptography.hazmat.primitives import serialization


class OcspTextRenderer:
    """
    Human-readable dump of an OCSP-response in the layout of openssl ocsp -resp_text.
    Output is bytes. Embedded certificates are not guaranteed to be valid UTF-8.
    """

    RESPONSE_STATUS_NAMES = {
        ocsp.OCSPResponseStatus.SUCCESSFUL: 'successful',
        ocsp.OCSPResponseStatus.MALFORMED_REQUEST: 'malformedrequest',
        ocsp.OCSPResponseStatus.INTERNAL_ERROR: 'internalerror',
        ocsp.OCSPResponseStatus.TRY_LATER: 'trylater',
        ocsp.OCSPResponseStatus.SIG_REQUIRED: 'sigrequired',
        ocsp.OCSPResponseStatus.UNAUTHORIZED: 'unauthorized'
    }

    CERT_STATUS_NAMES = {
        ocsp.OCSPCertStatus.GOOD: 'good',
        ocsp.OCSPCertStatus.REVOKED: 'revoked',
        ocsp.OCSPCertStatus.UNKNOWN: 'unknown'
    }

    # RFC 5280, 5.3.1 CRLReason
    REVOCATION_REASON_CODES = {
        x509.ReasonFlags.unspecified: 0,
        x509.ReasonFlags.key_compromise: 1,
        x509.ReasonFlags.ca_compromise: 2,
        x509.ReasonFlags.affiliation_changed: 3,
        x509.ReasonFlags.superseded: 4,
        x509.ReasonFlags.cessation_of_operation: 5,
        x509.ReasonFlags.certificate_hold: 6,
        x509.ReasonFlags.remove_from_crl: 8,
        x509.ReasonFlags.privilege_withdrawn: 9,
        x509.ReasonFlags.aa_compromise: 10
    }

    out = None

    def __init__(self, out=None):
        if out is None:
            out = io.BytesIO()
        self.out = out

    def render(self, ocsp_resp):
        status = ocsp_resp.response_status
        self._puts("OCSP Response Data:\n")
        self._puts("    OCSP Response Status: %s (0x%x)\n" % (self.RESPONSE_STATUS_NAMES[status], status.value))
        if status != ocsp.OCSPResponseStatus.SUCCESSFUL:
            return self.out.getvalue()

        self._puts("    Response Type: Basic OCSP Response\n")
        self._puts("    Version: 1 (0x0)\n")
        if ocsp_resp.responder_name is not None:
            self._puts("    Responder Id: %s\n" % self.name_oneline(ocsp_resp.responder_name))
        else:
            self._puts("    Responder Id: %s\n" % ocsp_resp.responder_key_hash.hex().upper())
        self._puts("    Produced At: %s\n" % self.format_time(ocsp_resp.produced_at_utc))
        self._puts("    Responses:\n")
        responses = list(ocsp_resp.responses)
        # Single response extensions are available only with one single response
        single_extensions = ocsp_resp.single_extensions if len(responses) == 1 else None
        for single in responses:
            self._render_single_response(single, single_extensions)
        self._render_extensions("Response Extensions", ocsp_resp.extensions, 4)
        self._render_signature(ocsp_resp.signature_algorithm_oid, ocsp_resp.signature)
        for cert in ocsp_resp.certificates:
            self.out.write(crypto.dump_certificate(crypto.FILETYPE_TEXT, crypto.X509.from_cryptography(cert)))
            self.out.write(cert.public_bytes(serialization.Encoding.PEM))

        return self.out.getvalue()

    def _render_single_response(self, single, single_extensions):
        self._puts("    Certificate ID:\n")
        self._puts("      Hash Algorithm: %s\n" % single.hash_algorithm.name)
        self._puts("      Issuer Name Hash: %s\n" % single.issuer_name_hash.hex().upper())
        self._puts("      Issuer Key Hash: %s\n" % single.issuer_key_hash.hex().upper())
        self._puts("      Serial Number: %s\n" % self.format_serial(single.serial_number))
        self._puts("    Cert Status: %s" % self.CERT_STATUS_NAMES[single.certificate_status])
        if single.certificate_status == ocsp.OCSPCertStatus.REVOKED:
            self._puts("\n    Revocation Time: %s" % self.format_time(single.revocation_time_utc))
            if single.revocation_reason is not None:
                self._puts("\n    Revocation Reason: %s (0x%x)" % (
                    single.revocation_reason.value, self.REVOCATION_REASON_CODES[single.revocation_reason]))
        self._puts("\n    This Update: %s" % self.format_time(single.this_update_utc))
        if single.next_update_utc is not None:
            self._puts("\n    Next Update: %s" % self.format_time(single.next_update_utc))
        self._puts("\n")
        self._render_extensions("Response Single Extensions", single_extensions, 8)
        self._puts("\n")

    def _render_extensions(self, title, extensions, indent):
        if not extensions:
            return
        self._puts("%s%s:\n" % (' ' * indent, title))
        indent += 4
        for ext in extensions:
            self._puts("%s%s: %s\n" % (' ' * indent, ext.oid._name, 'critical' if ext.critical else ''))
            self._puts("%s%s\n" % (' ' * (indent + 4), ext.value.public_bytes().hex().upper()))

    def _render_signature(self, algorithm_oid, signature):
        self._puts("    Signature Algorithm: %s" % algorithm_oid._name)
        for idx, byte in enumerate(signature):
            if idx % 18 == 0:
                self._puts("\n" + ' ' * 9)
            self._puts("%02x%s" % (byte, ':' if idx + 1 < len(signature) else ''))
        self._puts("\n")

    def _puts(self, text):
        self.out.write(text.encode('utf-8'))

    @staticmethod
    def name_oneline(name):
        components = []
        for rdn in name.rdns:
            for attribute in rdn:
                components.append("%s = %s" % (attribute.rfc4514_attribute_name, attribute.value))

        return ', '.join(components)

    @staticmethod
    def format_time(timestamp):
        return "%s %2d %02d:%02d:%02d %d GMT" % (timestamp.strftime('%b'), timestamp.day,
                                                 timestamp.hour, timestamp.minute, timestamp.second,
                                                 timestamp.year)

    @staticmethod
    def format_serial(serial_number):
        serial_hex = "%X" % serial_number
        if len(serial_hex) % 2:
            serial_hex = '0' + serial_hex

        return serial_hex
