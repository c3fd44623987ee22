from __future__ import annotations

def _pick_glsl_version(ctx_version_code: int) -> int:
    """Pick a GLSL version compatible with the active OpenGL context.

    - For OpenGL >= 3.3: use GLSL 330
    - For OpenGL >= 3.2: use GLSL 150
    """
    if ctx_version_code >= 330:
        return 330
    return 150

_VERT_BODY = """
in vec2 in_pos;

uniform mat4 u_proj;
uniform vec2 u_offset;

out vec2 v_world_pos;

void main() {
    v_world_pos = in_pos + u_offset;
    gl_Position = u_proj * vec4(v_world_pos, 0.0, 1.0);
}
"""

_FRAG_BODY = """in vec2 v_world_pos;

uniform vec3 u_color;
uniform vec2 u_cam_pos;
uniform float u_fade_start;
uniform float u_fade_end;

out vec4 f_color;

void main() {
    // Darken toward the edge of the loaded area so chunk pop-in is less visible.
    float dist = length(v_world_pos - u_cam_pos);
    float fade = smoothstep(u_fade_start, u_fade_end, dist);
    vec3 col = mix(u_color, u_color * 0.35, fade);
    f_color = vec4(col, 1.0);
}"""

def shader_sources(ctx_version_code: int) -> tuple[str, str]:
    ver = _pick_glsl_version(ctx_version_code)
    prefix = f"#version {ver}\n"
    return prefix + _VERT_BODY, prefix + _FRAG_BODY
