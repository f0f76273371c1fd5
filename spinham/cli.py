import os

import numpy as np
import typer
from typing_extensions import Annotated

from spinham import api
from spinham.config_loader import load_state_config
from spinham.exceptions import ConfigurationError, UnsupportedOperationError
from spinham.log import configure_logging
from spinham.state import State

app = typer.Typer(help="spinham: Hamiltonian parameters of an atomistic spin simulation")

TEMPLATE = """
geometry:
  bravais_vectors: [[1, 0, 0], [0, 1, 0], [0, 0, 1]]
  basis: [[0, 0, 0]]
  n_cells: [10, 10, 1]
  lattice_constant: 1.0

hamiltonian:
  model: neighbours
  boundary_conditions: [true, true, false]
  mu_s: 2.0
  external_field:
    magnitude: 0.0
    normal: [0, 0, 1]
  anisotropy:
    magnitude: 0.0
    normal: [0, 0, 1]
  exchange: [10.0]
  dmi: [6.0]
  dmi_chirality: 1

chain:
  n_images: 1
  n_chains: 1

strict: true
log_level: INFO
""".strip()


def _fmt(values) -> str:
    return np.array2string(np.asarray(values, dtype=float), precision=6, separator=", ")


@app.command()
def init(
    filename: Annotated[str, typer.Argument(help="Filename for the new config")] = "config.yaml"
):
    """
    Generate a template configuration file.
    """
    if os.path.exists(filename):
        typer.confirm(f"{filename} already exists. Overwrite?", abort=True)

    with open(filename, "w") as f:
        f.write(TEMPLATE + "\n")
    typer.echo(f"Created template config: {filename}")


@app.command()
def validate(
    config_file: Annotated[str, typer.Argument(help="Path to the config.yaml file")]
):
    """
    Validate a configuration file against the schema.
    """
    if not os.path.exists(config_file):
        typer.secho(f"Error: File {config_file} not found.", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        load_state_config(config_file)
    except ConfigurationError as e:
        typer.secho("Validation Failed:", fg=typer.colors.RED)
        typer.echo(str(e))
        raise typer.Exit(code=1)
    typer.secho(f"Success: {config_file} is valid.", fg=typer.colors.GREEN)


@app.command()
def show(
    config_file: Annotated[str, typer.Argument(help="Path to the config.yaml file")],
    image: Annotated[int, typer.Option(help="Image index, -1 for the active image")] = -1,
    chain: Annotated[int, typer.Option(help="Chain index, -1 for the active chain")] = -1,
):
    """
    Build the state described by a configuration file and print the parameters of one image.
    """
    try:
        config = load_state_config(config_file)
    except (FileNotFoundError, ConfigurationError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        state = State.from_config(config)
    except ValueError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    with state:
        try:
            name = api.hamiltonian_get_name(state, image, chain)
        except IndexError as e:
            typer.secho(f"Error: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)

        typer.echo(f"Hamiltonian:          {name}")
        bc = api.hamiltonian_get_boundary_conditions(state, image, chain)
        typer.echo(f"Boundary conditions:  {' '.join(str(int(p)) for p in bc)}")
        typer.echo(f"mu_s:                 {_fmt(api.hamiltonian_get_mu_s(state, image, chain))}")

        magnitude, normal = api.hamiltonian_get_field(state, image, chain)
        typer.echo(f"External field:       {magnitude:g} along {_fmt(normal)}")
        magnitude, normal = api.hamiltonian_get_anisotropy(state, image, chain)
        typer.echo(f"Anisotropy:           {magnitude:g} along {_fmt(normal)}")

        for label, getter in (("Exchange", api.hamiltonian_get_exchange), ("DMI", api.hamiltonian_get_dmi)):
            try:
                result = getter(state, image, chain)
            except UnsupportedOperationError:
                result = None
            if result is None:
                typer.echo(f"{label + ':':<22}unsupported")
            else:
                n_shells, values = result
                typer.echo(f"{label + ':':<22}{n_shells} shell(s) {_fmt(values)}")

        contributions = api.hamiltonian_get_energy_contributions(state, image, chain)
        typer.echo(f"Energy contributions: {', '.join(contributions) or 'none'}")


# Entry point for the console script
def main():
    configure_logging()
    app()


if __name__ == "__main__":
    main()
