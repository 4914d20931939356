"""Error kinds raised by the SRG pipeline stages."""

from __future__ import annotations


class SRGError(ValueError):
    """Base error; records the stage and the field that triggered it."""

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        field: str | None = None,
        gene_id: str | None = None,
    ) -> None:
        self.stage = str(stage)
        self.field = field
        self.gene_id = gene_id
        self.reason = message
        details = []
        if field is not None:
            details.append(f"field={field}")
        if gene_id is not None:
            details.append(f"gene={gene_id}")
        suffix = f" ({', '.join(details)})" if details else ""
        super().__init__(f"[{self.stage}] {message}{suffix}")


class MalformedMatrixError(SRGError):
    """Input counts violate the DGE matrix contract."""


class InsufficientDataError(SRGError):
    """Too few distinct detection counts to fit the expression trend."""


class DegenerateDistributionError(SRGError):
    """Residual spread is zero, so Z-scores are undefined."""
