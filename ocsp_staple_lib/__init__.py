# SPDX-License-Identifier: GPL-2.0

from .ocsp_response import OcspResponse, load_ocsp_response
from .basic_response import BasicResponse
from .trust_store import TrustStore
from .ocsp_text import OcspTextRenderer
from .exceptions import *

__all__ = ['OcspResponse', 'load_ocsp_response', 'BasicResponse', 'TrustStore', 'OcspTextRenderer']
# vim: autoindent tabstop=4 shiftwidth=4 expandtab softtabstop=4 filetype=python
