from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- Primitive Types ---
Vector3 = Union[List[float], Tuple[float, float, float]]


# --- Geometry ---
class LatticeParameters(BaseModel):
    a: float
    b: float
    c: float
    alpha: float = 90.0
    beta: float = 90.0
    gamma: float = 90.0


class GeometryConfig(BaseModel):
    model_config = ConfigDict(extra='forbid')

    lattice_parameters: Optional[LatticeParameters] = None
    # Raw vectors [[a1x, a1y, a1z], ...]
    bravais_vectors: Optional[List[Vector3]] = None
    lattice_constant: float = 1.0
    basis: List[Vector3] = Field(default_factory=lambda: [[0.0, 0.0, 0.0]])
    n_cells: Tuple[int, int, int] = (1, 1, 1)

    @field_validator('n_cells')
    @classmethod
    def check_n_cells(cls, v):
        if any(n < 1 for n in v):
            raise ValueError("n_cells entries must be positive.")
        return v

    @field_validator('basis')
    @classmethod
    def check_basis(cls, v):
        if not v:
            raise ValueError("basis must contain at least one atom.")
        for pos in v:
            if len(pos) != 3:
                raise ValueError(f"basis positions need three components, got {pos}.")
        return v

    @model_validator(mode='after')
    def check_lattice_source(self):
        if self.lattice_parameters is not None and self.bravais_vectors is not None:
            raise ValueError("Provide either 'lattice_parameters' or 'bravais_vectors', not both.")
        if self.lattice_parameters is None and self.bravais_vectors is None:
            # Simple cubic by default
            self.bravais_vectors = [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
        if self.bravais_vectors is not None:
            if len(self.bravais_vectors) != 3 or any(len(v) != 3 for v in self.bravais_vectors):
                raise ValueError("bravais_vectors must be a 3x3 matrix.")
        return self


# --- Hamiltonian ---
class DirectionalTerm(BaseModel):
    magnitude: float = 0.0
    normal: Vector3 = [0.0, 0.0, 1.0]

    @field_validator('normal')
    @classmethod
    def check_normal(cls, v):
        if len(v) != 3:
            raise ValueError("normal needs three components.")
        if all(abs(x) == 0.0 for x in v):
            raise ValueError("normal must not be the zero vector.")
        return v


class HamiltonianConfig(BaseModel):
    model_config = ConfigDict(extra='forbid')

    model: Literal['neighbours', 'pairs'] = 'neighbours'
    boundary_conditions: Tuple[bool, bool, bool] = (False, False, False)
    mu_s: float = 1.0
    # Field and anisotropy are only applied when given
    external_field: Optional[DirectionalTerm] = None
    anisotropy: Optional[DirectionalTerm] = None
    exchange: List[float] = Field(default_factory=list)
    dmi: List[float] = Field(default_factory=list)
    dmi_chirality: Literal[1, -1, 2, -2] = 1


# --- Chains ---
class ChainConfig(BaseModel):
    n_images: int = Field(default=1, ge=1)
    n_chains: int = Field(default=1, ge=1)


# --- Main Configuration ---
class StateConfig(BaseModel):
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    hamiltonian: HamiltonianConfig = Field(default_factory=HamiltonianConfig)
    chain: ChainConfig = Field(default_factory=ChainConfig)
    strict: bool = True
    log_level: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR'] = 'INFO'

    @model_validator(mode='after')
    def check_neel_dmi(self):
        ham = self.hamiltonian
        # Néel vectors z x r_ij vanish for bonds along z
        if ham.model == 'pairs' and ham.dmi and abs(ham.dmi_chirality) == 2 and self.geometry.n_cells[2] > 1:
            raise ValueError(
                "Néel DMI chirality (+-2) needs a lattice with a single cell along c "
                f"(n_cells[2] = {self.geometry.n_cells[2]})."
            )
        return self
