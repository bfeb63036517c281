"""Known template categories and the variables each one can reference."""
from . import config

TEMPLATE_CATEGORIES = {
    'TextGen': {
        'path': 'TextGen',
        'description': 'Main chat/roleplay generation',
        'variables': [
            'char', 'user', 'char_description', 'char_personality', 'char_profile',
            'char_message_examples', 'char_post_history_instructions', 'user_description',
            'other_chars', 'other_characters', 'messages', 'previous_messages', 'reply_to',
            'prefix', 'last_char', 'scenario', 'summary', 'context', 'now', 'documents',
            'memories', 'functions', 'last_function_call', 'vision', 'chat_style',
            'chat_flow', 'explicitLevel', 'text_processing', 'system_prompt',
            'system_intro', 'system_prompt_addons',
        ],
    },
    'TextGen/Includes': {
        'path': 'TextGen/Includes',
        'description': 'Shared TextGen components',
        'variables': [
            'char', 'user', 'char_description', 'char_personality', 'char_profile',
            'char_message_examples', 'user_description', 'other_chars', 'other_characters',
            'scenario', 'summary', 'context', 'now', 'documents', 'memories', 'functions',
            'vision', 'chat_style', 'chat_flow', 'explicitLevel', 'text_processing',
            'system_prompt_addons',
        ],
    },
    'ActionInference': {
        'path': 'ActionInference',
        'description': 'Action/function selection',
        'variables': [
            'char', 'user', 'char_personality', 'scenario', 'now', 'context',
            'messages', 'previous_messages', 'last_messages', 'message', 'functions',
            'last_function_call', 'characters', 'user_description', 'last_char',
        ],
    },
    'Summarization': {
        'path': 'Summarization',
        'description': 'Memory & summary generation',
        'variables': [
            'char', 'user', 'char_description', 'char_personality', 'char_profile',
            'user_description', 'other_characters', 'scenario', 'summary', 'explicit',
            'messages_to_summarize', 'messages_to_extract', 'document', 'memories',
        ],
    },
    'ComputerVision': {
        'path': 'ComputerVision',
        'description': 'Image description',
        'variables': [
            'char', 'user', 'explicitLevel', 'source', 'vision', 'image_label',
            'image_filename', 'message',
        ],
    },
    'ImageGen': {
        'path': 'ImageGen',
        'description': 'Image prompt generation',
        'variables': [
            'char', 'user', 'char_description', 'user_description', 'instructions',
            'user_prompt', 'include_char_appearance', 'include_user_appearance',
            'previous_messages', 'latest_messages', 'last_image_prompt',
        ],
    },
    'SpecialMessages': {
        'path': 'SpecialMessages',
        'description': 'Event notifications',
        'variables': ['char', 'user', 'message', 'effect', 'away_duration', 'image_description', 'source'],
    },
    'Includes': {
        'path': 'Includes',
        'description': 'Shared template components',
        'variables': ['char', 'user', 'messages', 'chat_style'],
    },
    'ChainOfThought': {
        'path': 'ChainOfThought/en',
        'is_module': True,
        'description': 'Pre-reply thinking/review',
        'variables': [
            'char', 'user', 'char_personality', 'char_description', 'char_profile',
            'scenario', 'summary', 'context', 'now', 'messages', 'explicit', 'suggested_reply',
        ],
    },
    'Continuations': {
        'path': 'Continuations/en',
        'is_module': True,
        'description': 'Idle/continuation messages',
        'variables': ['char', 'user', 'maybe', 'x'],
    },
}

VARIABLE_DEFINITIONS = {
    # Identity
    'char': {'type': 'string', 'description': 'Name of the AI character being role-played'},
    'user': {'type': 'string', 'description': 'Name of the human user'},

    # Character profile
    'char_description': {'type': 'string', 'description': 'Physical appearance of the character'},
    'char_personality': {'type': 'string', 'description': 'Personality traits and behavior'},
    'char_profile': {'type': 'string', 'description': 'Extended character information/lore'},
    'char_message_examples': {'type': 'array', 'description': 'Example messages showing how character speaks'},
    'char_post_history_instructions': {'type': 'string', 'description': 'Instructions added after message history'},

    'user_description': {'type': 'string', 'description': 'Description of the user/persona'},

    'other_chars': {'type': 'array<string>', 'description': 'List of other character names'},
    'other_characters': {'type': 'array<object>', 'description': 'Detailed character objects'},
    'characters': {'type': 'array<object>', 'description': 'All characters (story mode)'},

    # Messages
    'messages': {'type': 'array', 'description': 'Full conversation history'},
    'previous_messages': {'type': 'array', 'description': 'Earlier messages for context'},
    'last_messages': {'type': 'array', 'description': 'Recent messages for action inference'},
    'latest_messages': {'type': 'array', 'description': 'Most recent messages (image gen)'},
    'messages_to_extract': {'type': 'array', 'description': 'Messages for memory extraction'},
    'messages_to_summarize': {'type': 'array', 'description': 'Messages for summarization'},
    'message': {'type': 'object|string', 'description': 'Current message being processed'},
    'reply_to': {'type': 'object', 'description': 'Message being replied to'},
    'prefix': {'type': 'string', 'description': 'Forced start of response'},
    'last_char': {'type': 'string', 'description': 'Name of last character who spoke'},

    # Context and world state
    'scenario': {'type': 'string', 'description': 'Initial scenario/setting description'},
    'summary': {'type': 'string', 'description': 'Summary of story so far'},
    'context': {'type': 'array<string>', 'description': 'Current contextual information'},
    'now': {'type': 'string', 'description': 'Current date/time'},
    'event_text': {'type': 'string', 'description': 'Specific event specifications (story mode)'},
    'narrator_profile': {'type': 'string', 'description': 'Profile for narrator voice (story mode)'},
    'documents': {'type': 'array', 'description': 'Documents for reference (RAG)'},
    'document': {'type': 'string|object', 'description': 'Single document for memory extraction'},
    'memories': {'type': 'array', 'description': 'Stored memories for the character'},

    'functions': {'type': 'array', 'description': 'Available functions/actions'},
    'last_function_call': {'type': 'object|null', 'description': 'Previously executed function'},

    # Vision and image generation
    'vision': {'type': 'string', 'description': 'Description of what character currently sees'},
    'source': {'type': 'enum', 'description': 'Image source: "Eyes", "Screen", "Attachment"'},
    'image_description': {'type': 'string', 'description': 'Generated description of an image'},
    'image_label': {'type': 'string', 'description': 'Additional info provided with image'},
    'image_filename': {'type': 'string', 'description': 'Filename of attached image'},
    'last_image_prompt': {'type': 'string', 'description': 'Previously generated image prompt'},
    'include_char_appearance': {'type': 'boolean', 'description': 'Include character appearance in prompt'},
    'include_user_appearance': {'type': 'boolean', 'description': 'Include user appearance in prompt'},
    'instructions': {'type': 'string', 'description': 'Custom image gen prompting instructions'},
    'user_prompt': {'type': 'string', 'description': 'Custom user prompt override'},

    # Configuration
    'chat_style': {'type': 'enum', 'description': '"Assistant" | "Roleplay" | "Storytelling"'},
    'chat_flow': {'type': 'enum', 'description': '"Story" | (other)'},
    'explicitLevel': {'type': 'enum', 'description': '"Prohibited" | "Allowed" | "Encouraged"'},
    'text_processing': {'type': 'enum', 'description': '"Roleplay" | (other)'},
    'explicit': {'type': 'boolean', 'description': 'Allows unrestricted vocabulary'},
    'system_prompt': {'type': 'string', 'description': 'Complete override for system prompt'},
    'system_intro': {'type': 'string', 'description': 'Intro section override'},
    'system_prompt_addons': {'type': 'array<string>', 'description': 'Additional system instructions'},

    'away_duration': {'type': 'string', 'description': 'Human-readable duration'},
    'effect': {'type': 'string', 'description': 'Action effect description'},

    # Module-specific
    'suggested_reply': {'type': 'string', 'description': 'Reply fragment to review (ReviewPass)'},
    'maybe': {'type': 'boolean', 'description': 'Flag to include optional phrases'},
    'x': {'type': 'integer', 'description': 'Internal random counter'},
}

VARIABLE_GROUPS = {
    'Identity': ['char', 'user'],
    'Character': [
        'char_description', 'char_personality', 'char_profile', 'char_message_examples',
        'char_post_history_instructions',
    ],
    'User': ['user_description'],
    'Messages': [
        'messages', 'previous_messages', 'last_messages', 'latest_messages', 'messages_to_extract',
        'messages_to_summarize', 'message', 'reply_to', 'prefix', 'last_char',
    ],
    'Context': [
        'scenario', 'summary', 'context', 'now', 'event_text', 'narrator_profile', 'documents',
        'document', 'memories',
    ],
    'Functions': ['functions', 'last_function_call'],
    'Vision': [
        'vision', 'source', 'image_description', 'image_label', 'image_filename', 'last_image_prompt',
        'include_char_appearance', 'include_user_appearance', 'instructions', 'user_prompt',
    ],
    'Config': [
        'chat_style', 'chat_flow', 'explicitLevel', 'text_processing', 'explicit', 'system_prompt',
        'system_intro', 'system_prompt_addons',
    ],
    'Other': [
        'other_chars', 'other_characters', 'characters', 'away_duration', 'effect', 'suggested_reply',
        'maybe', 'x',
    ],
}


def _base_path(category):
    cfg = config.get_config()
    root = cfg['MODULES_ROOT'] if category.get('is_module') else cfg['PROMPTS_ROOT']
    return f"{root}/{category['path']}"


def list_categories():
    return [
        {
            'category': name,
            'base_path': _base_path(category),
            'description': category['description'],
            'is_module': category.get('is_module', False),
            'variables': list(category['variables']),
        }
        for name, category in TEMPLATE_CATEGORIES.items()
    ]


def category_for_path(template_path: str):
    """Most specific category whose base path contains ``template_path``."""
    best = None
    best_length = -1
    for name, category in TEMPLATE_CATEGORIES.items():
        base = _base_path(category)
        if template_path.startswith(base + '/') and len(base) > best_length:
            best, best_length = name, len(base)
    return best


def describe_variables(category_name: str):
    """Variables of a category, grouped, with their type and description.

    Unknown categories have no variables.
    """
    category = TEMPLATE_CATEGORIES.get(category_name)
    if category is None:
        return []

    available = set(category['variables'])
    groups = []
    for group_name, names in VARIABLE_GROUPS.items():
        present = [name for name in names if name in available]
        if not present:
            continue
        groups.append({
            'group': group_name,
            'variables': [
                {
                    'name': name,
                    **VARIABLE_DEFINITIONS.get(name, {'type': 'unknown', 'description': ''}),
                }
                for name in present
            ],
        })
    return groups
