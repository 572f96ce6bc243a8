"""Presentation-only actors: particles and shockwaves."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from game.game_state import GameState


def update_shockwaves(gs: GameState) -> None:
    for wave in gs.shockwaves:
        wave.radius += wave.growth
        wave.alpha -= wave.fade
    gs.shockwaves = [w for w in gs.shockwaves if not w.expired]


def update_particles(gs: GameState) -> None:
    for p in gs.particles:
        p.x += p.vx
        p.y += p.vy
        p.life -= 1
    gs.particles = [p for p in gs.particles if p.life > 0]
