"""
Physical and numerical constants used by the parameter core.
"""

# --- Physical Constants ---
# Bohr magneton in meV/T, converts a field in Tesla into an energy per mu_B
MU_B: float = 0.057883817555

# --- Numerical Constants ---
DIST_TOL: float = 1e-6
NORM_TOL: float = 1e-12
