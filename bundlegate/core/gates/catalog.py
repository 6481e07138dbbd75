"""
Registered feature gates.

Gates are feature flags using the tengu_* naming convention. Signatures
target the minified bundle: identifiers are matched with [\\w$]+ so they
survive different minification runs, while flag names, library calls and
environment variable names anchor the match.

Gate tiers (taken from v2.1.34 binary analysis):
  Tier 1 - Simple wrappers:  function X(){return g9("tengu_flag",!1)}
  Tier 2 - Env-guarded:      env-var check, then flag check
  Tier 3 - Complex:          multi-branch returns, subscription checks
  Tier 4 - Too complex:      env-var override preferred (detection-only)
  Tier 5 - Inline checks:    no wrapper function (detection-only)
"""

import re

from .base import FeatureGate, GateCategory, Signature
from .strategies import DetectionOnly, ReplaceFragment, ReturnConstant


def _simple_wrapper(flag: str) -> Signature:
    return Signature.compile(
        "v2.1.34",
        r'function\s+([a-zA-Z_$][\w$]*)\(\)\{return\s*[\w$]+\("' + flag + r'",!1\)\}',
    )


def _detect_only(
    name: str,
    codename: str,
    description: str,
    category: GateCategory = GateCategory.FEATURE,
    env_override: str | None = None,
) -> FeatureGate:
    return FeatureGate(
        name=name,
        codename=codename,
        description=description,
        category=category,
        signatures=(Signature.compile("any", re.escape(name) + r"(?![a-z0-9_])"),),
        strategy=DetectionOnly(),
        env_override=env_override,
    )


# ---------------------------------------------------------------------------
# Patchable gates
# ---------------------------------------------------------------------------

# Removed in v2.1.37 when swarm mode was fully rolled out
SWARM_MODE_GATE = FeatureGate(
    name="tengu_brass_pebble",
    codename="swarm-mode",
    description="Swarm/TeammateTool/delegate gate - enables multi-agent coordination",
    category=GateCategory.FEATURE,
    signatures=(
        Signature.compile(
            "v2.1.34",
            r"function\s+([a-zA-Z_$][\w$]*)\(\)\{if\([\w$]+\(process\.env\.CLAUDE_CODE_AGENT_SWARMS\)\)"
            r'return!1;return\s*[\w$]+\("tengu_brass_pebble",!1\)\}',
        ),
    ),
    strategy=ReturnConstant("!0"),
    env_override="CLAUDE_CODE_AGENT_SWARMS",
)

TEAM_MODE_GATE = FeatureGate(
    name="tengu_brass_pebble",
    codename="team-mode",
    description="Team mode - TodoWrite-adjacent task/team features",
    category=GateCategory.FEATURE,
    signatures=(Signature.compile("v2.1.34", r"isEnabled\(\)\{return!([\w$]+)\(\)\}"),),
    strategy=ReplaceFragment("isEnabled(){return!0}"),
    env_override="CLAUDE_CODE_TEAM_MODE",
)

WORKOUT_V2_GATE = FeatureGate(
    name="tengu_workout2",
    codename="workout-v2",
    description="Workout v2 - iteration on tengu_workout feature",
    category=GateCategory.FEATURE,
    signatures=(_simple_wrapper("tengu_workout2"),),
    strategy=ReturnConstant("!0"),
)

KEYBINDING_CUSTOMIZATION_GATE = FeatureGate(
    name="tengu_keybinding_customization_release",
    codename="keybinding-customization",
    description="Keybinding customization - enables custom keyboard shortcut configuration",
    category=GateCategory.FEATURE,
    signatures=(_simple_wrapper("tengu_keybinding_customization_release"),),
    strategy=ReturnConstant("!0"),
)

SESSION_MEMORY_GATE = FeatureGate(
    name="tengu_session_memory",
    codename="session-memory",
    description="Session memory - persistent memory across sessions",
    category=GateCategory.FEATURE,
    signatures=(_simple_wrapper("tengu_session_memory"),),
    strategy=ReturnConstant("!0"),
)

OBOE_GATE = FeatureGate(
    name="tengu_oboe",
    codename="oboe",
    description="Auto memory - persistent MEMORY.md loaded into the system prompt each turn",
    category=GateCategory.FEATURE,
    signatures=(
        Signature.compile(
            "v2.1.34",
            r"function\s+([a-zA-Z_$][\w$]*)\(\)\{if\([\w$]+\(process\.env\.CLAUDE_CODE_DISABLE_AUTO_MEMORY\)\)"
            r'return!1;return\s*[\w$]+\("tengu_oboe",!1\)\}',
        ),
    ),
    strategy=ReturnConstant("!0"),
    env_override="CLAUDE_CODE_DISABLE_AUTO_MEMORY",
)

AMBER_FLINT_GATE = FeatureGate(
    name="tengu_amber_flint",
    codename="amber-flint",
    description="Agent teams gate - second check after CLAUDE_CODE_EXPERIMENTAL_AGENT_TEAMS",
    category=GateCategory.FEATURE,
    signatures=(
        Signature.compile(
            "v2.1.34",
            r"function\s+([a-zA-Z_$][\w$]*)\(\)\{if\(![\w$]+\(process\.env\.CLAUDE_CODE_EXPERIMENTAL_AGENT_TEAMS\)\)"
            r'return!1;if\(![\w$]+\("tengu_amber_flint",!0\)\)return!1;return!0\}',
        ),
    ),
    strategy=ReturnConstant("!0"),
    env_override="CLAUDE_CODE_EXPERIMENTAL_AGENT_TEAMS",
)

SILVER_LANTERN_GATE = FeatureGate(
    name="tengu_silver_lantern",
    codename="silver-lantern",
    description='Promo mode selector - returns "promo" or "launch-only" based on subscription state',
    category=GateCategory.FEATURE,
    signatures=(
        # v2.1.37: if(sgT())return pB()?"promo-copper":"promo"
        Signature.compile(
            "v2.1.37",
            r'function\s+([a-zA-Z_$][\w$]*)\(\)\{if\(![\w$]+\("tengu_silver_lantern",!1\)\)return null;'
            r'if\([\w$]+\(\)\)return[\w$() ?":+-]*"promo(?:-copper)?";'
            r'if\([\w$]+\(\)\)return"launch-only";return null\}',
        ),
        # v2.1.34: if(sgT())return"promo"
        Signature.compile(
            "v2.1.34",
            r'function\s+([a-zA-Z_$][\w$]*)\(\)\{if\(![\w$]+\("tengu_silver_lantern",!1\)\)return null;'
            r'if\([\w$]+\(\)\)return"promo";'
            r'if\([\w$]+\(\)\)return"launch-only";return null\}',
        ),
    ),
    strategy=ReturnConstant('"promo"'),
)

# Function body with up to 2 levels of brace nesting, anchored on the flag name
COPPER_LANTERN_GATE = FeatureGate(
    name="tengu_copper_lantern",
    codename="copper-lantern",
    description="Pro/Max promo banner - checks subscription tier, config dates and extra usage visits",
    category=GateCategory.FEATURE,
    signatures=(
        Signature.compile(
            "v2.1.34",
            r"function\s+([a-zA-Z_$][\w$]*)\(\)\{"
            r"(?:[^{}]|\{(?:[^{}]|\{[^{}]*\})*\})*?"
            r"tengu_copper_lantern"
            r"(?:[^{}]|\{(?:[^{}]|\{[^{}]*\})*\})*\}",
        ),
    ),
    strategy=ReturnConstant("!0"),
)

PATCHABLE_GATES: list[FeatureGate] = [
    SWARM_MODE_GATE,
    TEAM_MODE_GATE,
    WORKOUT_V2_GATE,
    KEYBINDING_CUSTOMIZATION_GATE,
    SESSION_MEMORY_GATE,
    OBOE_GATE,
    AMBER_FLINT_GATE,
    SILVER_LANTERN_GATE,
    COPPER_LANTERN_GATE,
]

# ---------------------------------------------------------------------------
# Detection-only gates
# ---------------------------------------------------------------------------

DETECTION_ONLY_GATES: list[FeatureGate] = [
    # Tier 4: too complex, env var override preferred
    _detect_only(
        "tengu_chomp_inflection",
        "chomp-inflection",
        "Prompt suggestions - suggests next prompts after responses",
        env_override="CLAUDE_CODE_ENABLE_PROMPT_SUGGESTION",
    ),
    _detect_only(
        "tengu_vinteuil_phrase",
        "vinteuil-phrase",
        "Simplified system prompt - lighter prompt variant",
        env_override="CLAUDE_CODE_SIMPLE",
    ),
    # Tier 5: inline checks with no wrapper function
    _detect_only(
        "tengu_speculation",
        "speculation",
        "Speculative execution - pre-runs likely next tool calls while the user is typing",
    ),
    _detect_only(
        "tengu_structured_output_enabled",
        "structured-output",
        "Structured output mode - structured/typed responses from the model",
    ),
    _detect_only(
        "tengu_streaming_tool_execution2",
        "streaming-tool-exec-v2",
        "Streaming tool execution v2 - run tools while the response is still streaming",
    ),
    _detect_only(
        "tengu_thinkback",
        "thinkback",
        "Year-in-review animation skill - /think-back command",
    ),
    # Older entries, detection-only
    _detect_only(
        "tengu_system_prompt_global_cache",
        "system-prompt-global-cache",
        "Global system prompt caching - share the prompt cache across sessions",
        env_override="CLAUDE_CODE_FORCE_GLOBAL_CACHE",
    ),
    _detect_only(
        "tengu_marble_anvil",
        "marble-anvil",
        "Clear thinking beta - adds thinking edits when thinking mode is on",
    ),
    _detect_only(
        "tengu_marble_kite",
        "marble-kite",
        'Write/Edit guardrail bypass - removes the "read before edit" restriction',
    ),
    _detect_only(
        "tengu_coral_fern",
        "coral-fern",
        "Past session access - instructions for accessing past session data",
    ),
    _detect_only(
        "tengu_quiet_fern",
        "quiet-fern",
        "IDE extension experiment gate",
    ),
    _detect_only(
        "tengu_plank_river_frost",
        "plank-river-frost",
        "Prompt suggestion mode - controls the suggestion mode system prompt",
    ),
    _detect_only(
        "tengu_quartz_lantern",
        "quartz-lantern",
        "Lantern family gate - related to copper_lantern and silver_lantern",
    ),
    _detect_only(
        "tengu_scarf_coffee",
        "scarf-coffee",
        "Conditional tool injection - adds a tool to the tool list when enabled",
    ),
    _detect_only(
        "tengu_cache_plum_violet",
        "cache-plum-violet",
        "Cache feature gate - related to prompt caching",
    ),
    _detect_only(
        "tengu_flicker",
        "flicker",
        "Terminal UI flicker telemetry - tracks resize flickers",
        category=GateCategory.TELEMETRY,
    ),
    _detect_only(
        "tengu_tool_pear",
        "tool-pear",
        "Tool schema filtering - how tool input schemas are presented to the model",
        category=GateCategory.EXPERIMENT,
    ),
    _detect_only(
        "tengu_cork_m4q",
        "cork-m4q",
        "Policy spec injection into the system prompt",
    ),
    _detect_only(
        "tengu_tst_kx7",
        "tst-kx7",
        "Tool search experiment - tool search below threshold with deferred tools",
        category=GateCategory.EXPERIMENT,
    ),
    _detect_only(
        "tengu_plum_vx3",
        "plum-vx3",
        "WebSearch behavior - forces web_search tool choice with an alternate model",
    ),
    _detect_only(
        "tengu_kv7_prompt_sort",
        "kv7-prompt-sort",
        "Prompt sorting - reorders system prompt sections for cache efficiency",
    ),
    _detect_only(
        "tengu_workout",
        "workout",
        "Workout v1 - original evaluation workflow feature (superseded by workout2)",
    ),
]
