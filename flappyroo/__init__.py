"""
FlappyRoo Package
=================

Simulation core for the FlappyRoo side-scroller: a gravity-driven
character dodges procedurally spawned obstacles and collects bonus items
while speed and obstacle density rise level by level.

Presentation is not part of this package; see tools/play_human.py for a
pygame frontend. All tunable constants live in game_config.yaml.
"""
