"""NxLib tree item, value and command names used by the adapter.

The strings match the names the NxLib tree uses, so the same constants work
against the real SDK and the in-memory runtime used in tests.
"""

# Tree items
ITM_CAMERAS = "Cameras"
ITM_BY_SERIAL_NO = "BySerialNo"
ITM_TYPE = "Type"
ITM_MODEL_NAME = "ModelName"
ITM_SERIAL_NUMBER = "SerialNumber"
ITM_PARAMETERS = "Parameters"
ITM_CAPTURE = "Capture"
ITM_PROJECTOR = "Projector"
ITM_FRONT_LIGHT = "FrontLight"
ITM_USE_DISPARITY_MAP_AREA_OF_INTEREST = "UseDisparityMapAreaOfInterest"
ITM_DISPARITY_MAP = "DisparityMap"
ITM_AREA_OF_INTEREST = "AreaOfInterest"
ITM_LEFT_TOP = "LeftTop"
ITM_RIGHT_BOTTOM = "RightBottom"
ITM_IMAGES = "Images"
ITM_RAW = "Raw"
ITM_LEFT = "Left"
ITM_POINT_MAP = "PointMap"
ITM_TIMEOUT = "Timeout"
ITM_TRIGGERED = "Triggered"
ITM_RETRIEVED = "Retrieved"
ITM_DECODE_DATA = "DecodeData"
ITM_PATTERNS = "Patterns"
ITM_PATTERN_POSE = "PatternPose"
ITM_ROTATION = "Rotation"
ITM_TRANSLATION = "Translation"
ITM_ANGLE = "Angle"
ITM_AXIS = "Axis"

# Item values
VAL_STEREO = "Stereo"
VAL_MONOCULAR = "Monocular"

# Commands
CMD_OPEN = "Open"
CMD_CLOSE = "Close"
CMD_TRIGGER = "Trigger"
CMD_CAPTURE = "Capture"
CMD_RETRIEVE = "Retrieve"
CMD_COMPUTE_DISPARITY_MAP = "ComputeDisparityMap"
CMD_COMPUTE_POINT_MAP = "ComputePointMap"
CMD_DISCARD_PATTERNS = "DiscardPatterns"
CMD_COLLECT_PATTERN = "CollectPattern"
CMD_ESTIMATE_PATTERN_POSE = "EstimatePatternPose"

