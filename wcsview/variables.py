from wcsview.utils import DotDict

limits = DotDict(
    {
        "min_scale": 0.1,
        "max_scale": 100.0,
        "zoom_in": 1.1,
        "zoom_out": 0.9,
        "frame_ms": 16,  # one display refresh
        "norm_epsilon": 1e-5,
    }
)

display = DotDict(
    {
        "low_percentile": 1.0,
        "high_percentile": 99.9,
        "colormap": "gray",
        "reverse": False,
        "scale_mode": "linear",
        "log_const": 1000.0,
        "asinh_const": 3.0,
    }
)

# font_name = "Agave"
font_name = "JetBrainsMono Nerd Font"
fonts = DotDict(
    {
        "sm": (font_name, 10),
        "md": (font_name, 12),
        "lg": (font_name, 14),
        "xl": (font_name, 16),
    }
)

colors = DotDict(
    {
        "bg": "#333233",
        "dark": "#1f1e1f",
        "blue": "#305770",
        "fg": "#ffffff",
        "accent": "#f4a261",
        "error": "#e63946",
        "north": "#4a90e2",
        "axis": "#e24a4a",
        "text": "#ffffff",
    }
)
