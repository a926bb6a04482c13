"""Per-origin TLS options."""
import os
from dataclasses import dataclass, field
from typing import List

from ..errors import TLSConfigError
from .base import clone_section, section_to_dict


@dataclass
class TLSOptions:
    """TLS settings for serving an origin and for connecting upstream."""
    full_chain_cert_path: str = ""
    private_key_path: str = ""
    insecure_skip_verify: bool = False
    certificate_authority_paths: List[str] = field(default_factory=list)
    client_cert_path: str = ""
    client_key_path: str = ""

    def validate(self) -> bool:
        """
        Check that the serving certificate and key are configured together.

        Returns:
            True if this origin should be served on the TLS listener

        Raises:
            TLSConfigError: if only one of the pair is set or a file is missing
        """
        has_cert = self.full_chain_cert_path != ""
        has_key = self.private_key_path != ""
        if has_cert != has_key:
            raise TLSConfigError(
                "missing tls config. both full_chain_cert_path and private_key_path must be provided")
        if not has_cert:
            return False
        for label, path in (("full_chain_cert_path", self.full_chain_cert_path),
                            ("private_key_path", self.private_key_path)):
            if not os.path.isfile(path):
                raise TLSConfigError(f"tls {label} [{path}] does not exist")
        return True

    def clone(self) -> "TLSOptions":
        return clone_section(self)

    def to_dict(self):
        return section_to_dict(self)
