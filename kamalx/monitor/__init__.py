"""kamalx monitor — Rich rendering of the deploy dashboard.

Modules
-------
pane
    ``ScrollPane``, a fixed-capacity, bottom-anchored scrolling region.
renderer
    ``DashboardRenderer`` routes events into panes and draws the progress
    bar; ``render()`` composes everything into a Rich ``Layout``.
surface
    ``LiveSurface`` shows that layout full-screen via ``Rich.Live``.
"""
