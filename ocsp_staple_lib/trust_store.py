# vim: autoindent tabstop=4 shiftwidth=4 expandtab softtabstop=4 filetype=python

# SPDX-License-Identifier: GPL-2.0

import os
from OpenSSL import crypto  # pip3 install pyOpenSSL
from .exceptions import *


class TrustStore:
    """
    Trusted CA-certificates for one verification run.
    Never cached nor shared. Use as a context manager to get it released.
    """
    store = None

    def __init__(self):
        try:
            self.store = crypto.X509Store()
        except (crypto.Error, MemoryError) as exc:
            raise TrustStoreException("Failed to create X.509 trust store!") from exc

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @staticmethod
    def check_path(ca_file):
        if not isinstance(ca_file, (str, bytes, os.PathLike)):
            raise InvalidArgumentException("Trust store location must be a path, not %s" %
                                           ca_file.__class__.__name__)

    def load_locations(self, ca_file, strict=True, verbose=False):
        """
        Load trusted CA-certificates from a PEM-bundle.
        :param ca_file: path to file with trusted CA-certificates
        :param strict: on False, a failing load is ignored and an empty or partially loaded store is used
        :param verbose:
        :return: True if load succeeded
        """
        self.check_path(ca_file)
        if self.store is None:
            raise TrustStoreException("Trust store has been released!")

        try:
            self.store.load_locations(os.fspath(ca_file))
        except crypto.Error as exc:
            if strict:
                raise TrustStoreLoadException("Could not load trusted CA-certificates from %s" %
                                              os.fsdecode(ca_file)) from exc
            if verbose:
                print("Warning! Could not load trusted CA-certificates from %s. Continuing with what was loaded." %
                      os.fsdecode(ca_file))
            return False

        return True

    def close(self):
        self.store = None
