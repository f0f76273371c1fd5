#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Simulation state: chains of images and the index resolver.

A `State` holds one or more `SpinSystemChain` objects, each a list of
`SpinSystem` images. Every image owns its `Geometry` and its
`ParameterStore`. Callers address an image by ``(idx_image, idx_chain)``;
negative indices select the active image of the active chain.
"""
import logging
import uuid
import weakref
from typing import List, Optional, Sequence, Tuple

from .geometry import Geometry
from .log import PACKAGE_LOGGER, ImageLoggerAdapter, LogBuffer
from .neighbours import CHIRALITY_BLOCH
from .schema import HamiltonianConfig, StateConfig
from .store import ParameterStore

logger = logging.getLogger(__name__)


class SpinSystem:
    """
    One image: a spin configuration's geometry and Hamiltonian parameters.

    Attributes:
        geometry (Geometry): Lattice of the image.
        store (ParameterStore): Parameters of the image, destroyed with it.
    """

    def __init__(
        self,
        geometry: Geometry,
        model: str = "neighbours",
        boundary_conditions: Sequence[bool] = (False, False, False),
        mu_s: float = 1.0,
        dmi_chirality: int = CHIRALITY_BLOCH,
    ):
        self.geometry = geometry
        self.store = ParameterStore(
            geometry,
            model=model,
            boundary_conditions=boundary_conditions,
            mu_s=mu_s,
            dmi_chirality=dmi_chirality,
        )

    @property
    def hamiltonian(self):
        return self.store.hamiltonian

    @property
    def nos(self) -> int:
        return self.geometry.nos

    def apply_config(self, config: HamiltonianConfig, log: Optional[logging.LoggerAdapter] = None):
        """Set the initial parameters of `config` through the store's setters."""
        store = self.store
        store.set_boundary_conditions(config.boundary_conditions, log=log)
        store.set_mu_s(config.mu_s, log=log)
        if config.external_field is not None:
            store.set_field(config.external_field.magnitude, config.external_field.normal, log=log)
        if config.anisotropy is not None:
            store.set_anisotropy(config.anisotropy.magnitude, config.anisotropy.normal, log=log)
        if config.exchange:
            store.set_exchange(len(config.exchange), config.exchange, log=log)
        if config.dmi:
            store.set_dmi(len(config.dmi), config.dmi, log=log)


class SpinSystemChain:
    """Ordered images of one chain, with one of them marked active."""

    def __init__(self, images: Sequence[SpinSystem]):
        if not images:
            raise ValueError("A chain needs at least one image.")
        self.images: List[SpinSystem] = list(images)
        self.idx_active_image = 0

    @property
    def noi(self) -> int:
        return len(self.images)


class State:
    """
    Process state handed to every accessor call.

    Attributes:
        chains (List[SpinSystemChain]): All chains.
        idx_active_chain (int): Chain used for negative chain indices.
        strict (bool): Unsupported operations raise when True; otherwise they
            are logged and ignored.
        log (LogBuffer): In-memory log of everything the accessors reported at
            `log_level` or above. Detached on `close()` or when the state is
            garbage collected.
    """

    def __init__(self, chains: Sequence[SpinSystemChain], strict: bool = True, log_level=logging.INFO):
        if not chains:
            raise ValueError("A state needs at least one chain.")
        self.chains: List[SpinSystemChain] = list(chains)
        self.idx_active_chain = 0
        self.strict = strict

        self.state_id = uuid.uuid4().hex
        self.log = LogBuffer(state_id=self.state_id, level=log_level)
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        # The package logger passes everything the most verbose state asks for
        if package_logger.level == logging.NOTSET or package_logger.level > self.log.level:
            package_logger.setLevel(self.log.level)
        package_logger.addHandler(self.log)
        self._detach_log = weakref.finalize(self, package_logger.removeHandler, self.log)

    @classmethod
    def from_config(cls, config: StateConfig) -> "State":
        """Build every image of `config` and apply its initial parameters."""
        geometry = Geometry.from_config(config.geometry)
        ham = config.hamiltonian
        chains = []
        for _ in range(config.chain.n_chains):
            images = [
                SpinSystem(geometry, ham.model, ham.boundary_conditions, ham.mu_s, ham.dmi_chirality)
                for _ in range(config.chain.n_images)
            ]
            chains.append(SpinSystemChain(images))

        state = cls(chains, strict=config.strict, log_level=config.log_level)
        try:
            for idx_chain, chain in enumerate(state.chains):
                for idx_image, image in enumerate(chain.images):
                    image.apply_config(ham, log=state.image_logger(idx_image, idx_chain, sender="IO"))
        except ValueError:
            state.close()
            raise
        logger.info(
            f"Created state: {len(chains)} chain(s) of {config.chain.n_images} image(s), "
            f"{geometry.nos} spins, Hamiltonian '{state.active_image.hamiltonian.name}'"
        )
        return state

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        """Detach the in-memory log from the package logger. Safe to call twice."""
        self._detach_log()

    @property
    def active_chain(self) -> SpinSystemChain:
        return self.chains[self.idx_active_chain]

    @property
    def active_image(self) -> SpinSystem:
        chain = self.active_chain
        return chain.images[chain.idx_active_image]

    def image_logger(self, idx_image: int, idx_chain: int, sender: str = "API") -> ImageLoggerAdapter:
        """Logger adapter tagging records with this state and the given image."""
        return ImageLoggerAdapter(
            logging.getLogger(f"{PACKAGE_LOGGER}.api"),
            sender=sender,
            idx_image=idx_image,
            idx_chain=idx_chain,
            state_id=self.state_id,
        )


def resolve_indices(state: State, idx_image: int = -1, idx_chain: int = -1) -> Tuple[int, int]:
    """
    Turn possibly negative indices into concrete ones.

    Raises:
        IndexError: If either index is outside the state.
    """
    if idx_chain < 0:
        idx_chain = state.idx_active_chain
    if idx_chain >= len(state.chains):
        logger.error(f"Chain index {idx_chain} out of range ({len(state.chains)} chain(s))")
        raise IndexError(f"Chain index {idx_chain} out of range ({len(state.chains)} chain(s)).")

    chain = state.chains[idx_chain]
    if idx_image < 0:
        idx_image = chain.idx_active_image
    if idx_image >= chain.noi:
        logger.error(f"Image index {idx_image} out of range ({chain.noi} image(s) in chain {idx_chain})")
        raise IndexError(
            f"Image index {idx_image} out of range ({chain.noi} image(s) in chain {idx_chain})."
        )
    return idx_image, idx_chain


def from_indices(state: State, idx_image: int = -1, idx_chain: int = -1) -> Tuple[SpinSystem, SpinSystemChain]:
    """Resolve ``(idx_image, idx_chain)`` to the image and its chain."""
    idx_image, idx_chain = resolve_indices(state, idx_image, idx_chain)
    chain = state.chains[idx_chain]
    return chain.images[idx_image], chain
