# Minimal state constants (kept for clarity)

# Wizard steps

# Step 1: listing + owner details, eligibility banner, "start" action
STEP_REVIEW = 1

# Step 2: camera grant, capture / retake / capture another, submit
STEP_CAPTURE = 2

# Step 3: submission accepted. Terminal.
STEP_DONE = 3

STEP_LABELS = {
    STEP_REVIEW: "details",
    STEP_CAPTURE: "verify",
    STEP_DONE: "profile",
}


# Capture device states

# No device requested yet (or the last acquisition failed)
DEVICE_IDLE = "idle"

# Acquisition in flight
DEVICE_ACQUIRING = "acquiring"

# Handle open, frames readable
DEVICE_STREAMING = "streaming"

# Handle closed after streaming
DEVICE_RELEASED = "released"
