#!/usr/bin/env python3

# vim: autoindent tabstop=4 shiftwidth=4 expandtab softtabstop=4 filetype=python

import sys
import argparse
from cryptography import x509
from ocsp_staple_lib import (
    load_ocsp_response,
    DecodeException,
    NonSuccessfulStatusException,
    TrustStoreException,
    VerificationFailedException
)


def read_file(file_name):
    with open(file_name, 'rb') as infile:
        return infile.read()


def write_ocsp_response_into_file(ocsp_response_file, ocsp_response):
    with open(ocsp_response_file, 'wb') as outfile:
        outfile.write(ocsp_response)


def load_cert_chain(chain_file):
    if not chain_file:
        return []

    return x509.load_pem_x509_certificates(read_file(chain_file))


def print_response_info(ocsp_info, peer_cert_chain):
    print("OCSP response status: %s" % ocsp_info['response_status'])
    if not ocsp_info['response_status_ok']:
        return

    responder_info = ''
    if ocsp_info['responder_name']:
        for component_name in ocsp_info['responder_name']:
            responder_info += "\n    %s=%s" % (component_name, ocsp_info['responder_name'][component_name])
    else:
        responder_info = ocsp_info['responder_key_hash'].hex()
    print("  Responder: %s" % responder_info)
    print("  Produced at: %s" % ocsp_info['produced_at'])
    print("  Signature algorithm: %s" % ocsp_info['signature_algorithm'])
    print("  Certificates in response: %d, in peer chain: %d" % (
        len(ocsp_info['certificates']), len(peer_cert_chain)))
    for single in ocsp_info['responses']:
        print("  Serial #: %s" % single['serial_number'])
        print("    Certificate status: %s" % single['certificate_status'])
        if single['revocation_time']:
            print("    Revocation time: %s" % single['revocation_time'])
            print("    Revocation reason: %s" % single['revocation_reason'])
        print("    This update: %s" % single['this_update'])
        print("    Next update: %s" % single['next_update'])


def main():
    parser = argparse.ArgumentParser(description='Stapled OCSP-response verification tool')
    parser.add_argument('--response-file', metavar='DER-OCSP-RESPONSE-FILE', required=True,
                        help='DER-formatted OCSP-response to read')
    parser.add_argument('--chain-file', metavar='PEM-CERT-FILE',
                        help='PEM-formatted certificate chain of the peer, in order received')
    parser.add_argument('--ca-file', metavar='PEM-CERT-FILE',
                        help='Trusted CA-certificates to verify the OCSP-response against')
    parser.add_argument('--lenient-trust-store', action='store_true', default=False,
                        help='Ignore errors loading trusted CA-certificates')
    parser.add_argument('--text', action='store_true', default=False,
                        help='Output OCSP-response as text')
    parser.add_argument('--output-der-file', metavar='DER-OCSP-RESPONSE-FILE',
                        help='Write DER-formatted OCSP-response into a file, if specified')
    parser.add_argument('--silent', action='store_true', default=False,
                        help='Normal mode is to be verbose and output human-readable information.')
    args = parser.parse_args()

    peer_cert_chain = load_cert_chain(args.chain_file)
    try:
        ocsp_resp = load_ocsp_response(read_file(args.response_file), peer_cert_chain)
    except DecodeException as exc:
        print("Error: %s" % exc, file=sys.stderr)
        sys.exit(1)

    if args.lenient_trust_store:
        ocsp_resp.trust_store_load_strict = False

    verify_stat = True
    with ocsp_resp:
        if not args.silent:
            print_response_info(ocsp_resp.as_dict(), peer_cert_chain)
        if args.text:
            sys.stdout.flush()
            sys.stdout.buffer.write(ocsp_resp.as_text())
            sys.stdout.flush()

        if args.output_der_file:
            write_ocsp_response_into_file(args.output_der_file, ocsp_resp.as_der_bytes())

        if args.ca_file:
            try:
                ocsp_resp.verify(args.ca_file, verbose=not args.silent)
                if not args.silent:
                    print("Response verify OK")
            except NonSuccessfulStatusException as exc:
                verify_stat = False
                print("Response not eligible for verification: %s" % exc)
            except TrustStoreException as exc:
                verify_stat = False
                print("Trust store failure: %s" % exc)
            except VerificationFailedException as exc:
                verify_stat = False
                print("Response verify failure: %s" % exc)

    if not verify_stat:
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
