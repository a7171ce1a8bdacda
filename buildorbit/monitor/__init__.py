"""buildorbit monitor — turns draw plans into something to look at.

Modules
-------
session
    ``OrbitSession`` is the render-loop model: current root, animation
    clock and the handle of the watched build.
canvas
    The ``Canvas`` render capability and ``TerminalCanvas``, a Rich
    character-cell implementation.
renderer
    ``OrbitRenderer`` wraps canvas frames in Rich panels, including
    continuous ``Rich.Live`` mode.
"""
