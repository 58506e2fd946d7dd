"""
Render the three orthogonal views of a synthetic volume, and save them
as PNG images.

The volume is a sphere with a smooth intensity falloff, and a label
overlay marks its core. The three renderers share the volume, so that
moving the cursor in one of them is seen by the others.
"""

import numpy as np
import sliceview


# A 64x64x48 volume with anisotropic voxels
i, j, k = np.mgrid[0:64, 0:64, 0:48]
dist = np.sqrt((i - 32) ** 2 + (j - 28) ** 2 + ((k - 24) * 1.5) ** 2)
data = np.clip(1000 - dist * 30, 0, None)
labels = (dist < 8).astype(np.int32)

volume = sliceview.Volume.from_numpy(
    data,
    spacing=(1, 1, 1.5),
    origin=(-32, -32, -36),
    labels=labels,
    colortable={1: (255, 64, 0, 255)},
)
volume.labelmap.opacity = 0.5
volume.max_color = "#ffe0c0"

renderers = [
    sliceview.SliceRenderer((300, 300), orientation=orientation)
    for orientation in ("sagittal", "coronal", "axial")
]
for renderer in renderers:
    renderer.add(volume)

# Move the cursors to a point on the axial view
pick = renderers[2].xy2ijk(170, 130)
if pick is not None:
    for orientation, index in zip(sliceview.Orientation, pick.axis_indices):
        volume.set_index(orientation, index)
    print("Picked voxel", pick.slice_indices, "at", pick.world)

for renderer in renderers:
    renderer.render()
    name = renderer.orientation.anatomical_name
    sliceview.save_image(renderer, f"~/sliceview_{name}.png")
