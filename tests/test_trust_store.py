# SPDX-License-Identifier: GPL-2.0

"""Tests for the per-verification trust store."""

import pytest

from ocsp_staple_lib import (
    TrustStore,
    InvalidArgumentException,
    TrustStoreException,
    TrustStoreLoadException
)


def test_load_locations(ca_file):
    with TrustStore() as trust_store:
        assert trust_store.load_locations(ca_file) is True
        assert trust_store.store is not None

    assert trust_store.store is None


def test_load_locations_missing_file_strict(tmp_path):
    with TrustStore() as trust_store:
        with pytest.raises(TrustStoreLoadException):
            trust_store.load_locations(str(tmp_path / 'missing.pem'))


def test_load_locations_not_certificates(tmp_path):
    garbage_file = tmp_path / 'garbage.pem'
    garbage_file.write_bytes(b'this is not a certificate bundle\n')

    with TrustStore() as trust_store:
        with pytest.raises(TrustStoreException):
            trust_store.load_locations(str(garbage_file))


def test_load_locations_missing_file_lenient(tmp_path, capsys):
    with TrustStore() as trust_store:
        assert trust_store.load_locations(str(tmp_path / 'missing.pem'), strict=False, verbose=True) is False

    assert 'Warning!' in capsys.readouterr().out


def test_check_path():
    TrustStore.check_path('/etc/ssl/certs/ca-certificates.crt')
    TrustStore.check_path(b'/etc/ssl/certs/ca-certificates.crt')
    with pytest.raises(InvalidArgumentException):
        TrustStore.check_path(['/etc/ssl/certs/ca-certificates.crt'])


def test_load_after_close(ca_file):
    trust_store = TrustStore()
    trust_store.close()

    with pytest.raises(TrustStoreException):
        trust_store.load_locations(ca_file)
