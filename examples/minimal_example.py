#!/usr/bin/env python3
"""
Minimal Example: trackfx API Usage
==================================

Shows the essential API calls without extra boilerplate.
This is the "quick reference" version.
"""

import json

from trackfx import Tracker
from trackfx.core.video import VideoReader, VideoWriter


# =============================================================================
# STEP 1: LOAD TRACKING DATA
# Equivalent to: trackfx render input.mp4 -td clip.data -o preview.mp4
# =============================================================================

input_video = "input.mp4"
tracker = Tracker("clip.data")
print(f"Loaded {len(tracker.tracked_data)} tracked frames")

# =============================================================================
# STEP 2: ADJUST THE BOX WITH CURVES
# Nudge right over the first 100 frames and grow the box slightly.
# =============================================================================

tracker.delta_x.add_point(1, 0.0)
tracker.delta_x.add_point(100, 0.05)
tracker.scale_x.add_point(1, 0.02)
tracker.scale_y.add_point(1, 0.02)

# =============================================================================
# STEP 3: RENDER
# =============================================================================

with VideoReader(input_video) as reader:
    props = reader.properties
    with VideoWriter("preview.mp4", props) as writer:
        for frame_num, frame in reader:
            writer.write(tracker.render(frame, frame_num))

# =============================================================================
# STEP 4: SAVE THE EFFECT
# =============================================================================

with open("tracker.json", "w") as f:
    f.write(tracker.json())

print(json.dumps(tracker.properties(50)["delta_x"], indent=2))
