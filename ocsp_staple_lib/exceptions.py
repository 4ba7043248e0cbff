# SPDX-License-Identifier: GPL-2.0

# Define types for different exceptions for better error handling

class NotConstructibleException(NotImplementedError):
    pass


class InvalidArgumentException(TypeError):
    pass


class DecodeException(ValueError):
    pass


class DisposedException(Exception):
    pass


class NonSuccessfulStatusException(ValueError):

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class TrustStoreException(Exception):
    pass


class TrustStoreLoadException(TrustStoreException):
    pass


class EncodingException(ValueError):
    pass


class OutOfMemoryException(MemoryError):
    pass


class TextRenderException(ValueError):
    pass


class VerificationFailedException(Exception):
    """
    OCSP basic verification did not return a positive result.
    code: numeric reason code of the failing step
    reason: short reason string, ie. 'certificate verify error'
    message: detail text, ie. X.509 verify error string of the chain builder
    """

    def __init__(self, code, reason, message=None):
        if message:
            super().__init__("%s: %s" % (reason, message))
        else:
            super().__init__(reason)
        self.code = code
        self.reason = reason
        self.message = message


class UnsupportedPublicKeyAlgorithmException(Exception):
    pass
