"""
world.py

Role:
    Build the reference nine-ball table in PyBullet.

What it loads:
    - A static table bed (box) whose top face is the plane y = 0.
    - Four cushions around the bed. Pockets are capture circles at the four
      corners and the two side rails (see POCKETS); the cushions run
      through them, and a ball whose centre enters a circle counts as sunk.
    - A parking tray far below the table ("plane.urdf" from pybullet_data,
      rotated so its normal is +y). Sunk balls are parked there.
    - Ten sphere bodies at the canonical rack positions (ball.py).

Coordinates match the game: y up, x along the table, z across it; a ball
radius is 2.8785 units.

Overrides:
    Every dimension and material knob lives in constants.py and can be set
    from the environment (e.g. BREAK_SPEED=1400).
"""

import math

import pybullet as p
import pybullet_data

import constants as c
from ball import BALL, CANONICAL_POSITIONS

POCKETS = [
    (-c.TABLE_HALF_LENGTH, -c.TABLE_HALF_WIDTH),
    (0.0, -c.TABLE_HALF_WIDTH),
    (c.TABLE_HALF_LENGTH, -c.TABLE_HALF_WIDTH),
    (-c.TABLE_HALF_LENGTH, c.TABLE_HALF_WIDTH),
    (0.0, c.TABLE_HALF_WIDTH),
    (c.TABLE_HALF_LENGTH, c.TABLE_HALF_WIDTH),
]

BALL_COLORS = [
    [1.0, 1.0, 1.0, 1], [1.0, 0.85, 0.0, 1], [0.0, 0.2, 0.9, 1], [0.9, 0.1, 0.1, 1],
    [0.4, 0.0, 0.6, 1], [1.0, 0.5, 0.0, 1], [0.0, 0.5, 0.1, 1], [0.5, 0.1, 0.1, 1],
    [0.05, 0.05, 0.05, 1], [1.0, 0.85, 0.3, 1],
]


def _static_box(half_extents, position, color, restitution=0.0):
    col = p.createCollisionShape(p.GEOM_BOX, halfExtents=half_extents)
    vis = p.createVisualShape(p.GEOM_BOX, halfExtents=half_extents, rgbaColor=color)
    body = p.createMultiBody(baseMass=0, baseCollisionShapeIndex=col,
                             baseVisualShapeIndex=vis, basePosition=position)
    p.changeDynamics(body, -1, restitution=restitution, lateralFriction=c.BALL_FRICTION)
    return body


def park_position(ball):
    """Where a sunk ball rests on the tray; one spot per ball."""
    return [-c.TABLE_HALF_LENGTH + 4.0 * c.BALL_RADIUS * int(ball), c.TRAY_Y + c.BALL_RADIUS, 0.0]


class WORLD:
    """Table, cushions, tray and the ten ball bodies."""

    def __init__(self):
        """Create the table and rack the balls.

        Side effects:
            - Adds static bodies for the bed, cushions and tray.
            - Adds ten dynamic spheres; self.ballIds[i] is the body of BALL(i).
            - Gives the cue ball its break velocity along +x.
        """
        L, W = c.TABLE_HALF_LENGTH, c.TABLE_HALF_WIDTH
        H, T = c.CUSHION_HEIGHT, c.CUSHION_THICKNESS

        p.setAdditionalSearchPath(pybullet_data.getDataPath())
        self.trayId = p.loadURDF(
            "plane.urdf",
            basePosition=[0, c.TRAY_Y, 0],
            baseOrientation=p.getQuaternionFromEuler([-math.pi / 2, 0, 0]),
        )

        felt = [0.05, 0.45, 0.2, 1]
        wood = [0.35, 0.2, 0.1, 1]
        self.bedId = _static_box([L + T, 1.0, W + T], [0, -1.0, 0], felt)
        self.cushionIds = [
            _static_box([L, H / 2, T / 2], [0, H / 2, -(W + T / 2)], wood, c.CUSHION_RESTITUTION),
            _static_box([L, H / 2, T / 2], [0, H / 2, W + T / 2], wood, c.CUSHION_RESTITUTION),
            _static_box([T / 2, H / 2, W], [-(L + T / 2), H / 2, 0], wood, c.CUSHION_RESTITUTION),
            _static_box([T / 2, H / 2, W], [L + T / 2, H / 2, 0], wood, c.CUSHION_RESTITUTION),
        ]

        col = p.createCollisionShape(p.GEOM_SPHERE, radius=c.BALL_RADIUS)
        self.ballIds = []
        for ball in BALL:
            vis = p.createVisualShape(p.GEOM_SPHERE, radius=c.BALL_RADIUS, rgbaColor=BALL_COLORS[ball])
            body = p.createMultiBody(
                baseMass=c.BALL_MASS,
                baseCollisionShapeIndex=col,
                baseVisualShapeIndex=vis,
                basePosition=[float(v) for v in CANONICAL_POSITIONS[ball]],
            )
            p.changeDynamics(
                body, -1,
                restitution=c.BALL_RESTITUTION,
                lateralFriction=c.BALL_FRICTION,
                linearDamping=c.LINEAR_DAMPING,
                angularDamping=c.ANGULAR_DAMPING,
            )
            self.ballIds.append(body)

        p.resetBaseVelocity(self.ballIds[BALL.CUE], linearVelocity=[c.BREAK_SPEED, 0, 0])
