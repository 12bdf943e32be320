# --- Configuration Constants ---
DEFAULT_FPS = 30
DEFAULT_RESOLUTION = (1920, 1080)
FFT_SIZE = 2048  # Samples per transform window, must be a power of two
MIN_FFT_SIZE = 64
MAX_FFT_SIZE = 16384
BLOCK_SIZE = 1024  # Samples per audio callback when replaying a file

# Colors (ARGB, as authored in settings)
DEFAULT_COLOR = 0xFFFFFFFF
DEFAULT_COLOR_START = 0xFFFFE7C1  # Light orange/cream
DEFAULT_COLOR_END = 0xFFB63814  # Dark orange/red
DEFAULT_GLOW_COLOR = 0xFFFF7832  # Orange glow
BACKGROUND_COLOR = (5, 5, 10)  # BGR for OpenCV

# Tunable ranges: (min, max, default)
GLOW_STRENGTH_RANGE = (0.0, 1.0, 0.5)
THICKNESS_RANGE = (1.0, 20.0, 2.0)
LINE_WIDTH_RANGE = (1.0, 20.0, 4.0)
SMOOTHING_RANGE = (0.0, 1.0, 0.5)  # 0.0 = no smoothing, 0.9 = heavy trails
AMP_SCALE_RANGE = (0.1, 100.0, 1.0)
BAR_COUNT_RANGE = (1, 256, 64)
RADIUS_RANGE = (1.0, 4096.0, 200.0)

# Geometry
GLOW_THRESHOLD = 0.01  # Glow layer is skipped at or below this strength
GLOW_AMPLITUDE_GAIN = 0.5
PULSE_GLOW_WIDTH_GAIN = 4.0
BAR_GAP = 0.1  # Fraction of each bar slot left empty
WEDGE_FILL = 0.8  # Fraction of each angular slot covered by a wedge
WAVE_AMPLITUDE = 0.3  # Fraction of viewport height
MIRROR_AMPLITUDE = 0.4
CIRCLE_LINE_GAIN = 0.5

# Multi-wave layers: (scale multiplier, vertical offset in pixels)
MULTI_WAVE_GLOW_LAYER = (1.1, -5.0)
MULTI_WAVE_END_LAYER = (0.9, 5.0)
MULTI_WAVE_MAIN_LAYER = (1.0, 0.0)
