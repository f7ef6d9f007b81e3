"""Parameter classes for lattice valuation configuration."""

from dataclasses import dataclass

from ..enums import TreeModel
from ..exceptions import ConfigurationError, ValidationError


@dataclass(frozen=True, slots=True)
class BinomialParams:
    """Parameters for binomial tree valuation.

    Attributes
    ==========
    num_steps:
        Number of time steps in the binomial tree. Must be >= 1.
        More steps increase accuracy (O(N^2) work per valuation).
        Default: 50.
    model:
        Lattice parameterization, TreeModel.CRR or TreeModel.JARROW_RUDD.
        The string values "crr" / "jarrow_rudd" are accepted.
    log_timings:
        Emit a DEBUG timing record for every tree valuation.
    """

    num_steps: int = 50
    model: TreeModel | str = TreeModel.CRR
    log_timings: bool = False

    def __post_init__(self):
        if isinstance(self.num_steps, bool) or not isinstance(self.num_steps, int):
            raise ConfigurationError(
                f"num_steps must be an int, got {type(self.num_steps).__name__}"
            )
        if self.num_steps < 1:
            raise ValidationError(f"num_steps must be >= 1, got {self.num_steps}")

        if isinstance(self.model, str):
            try:
                object.__setattr__(self, "model", TreeModel(self.model.strip().lower()))
            except ValueError as exc:
                raise ConfigurationError(f"unknown tree model {self.model!r}") from exc
        if not isinstance(self.model, TreeModel):
            raise ConfigurationError(
                f"model must be TreeModel enum, got {type(self.model).__name__}"
            )
