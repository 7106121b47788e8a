"""Script Writer 选题表单的默认字段定义.

store 在没有已保存配置或配置无法解析时使用这里的种子, `reset_to_default` 也会回到这里.
"""

from __future__ import annotations

from datetime import datetime

from scriptform.schemas.form_config import (
    DatabaseSource,
    DividerField,
    FieldBase,
    FormConfiguration,
    LocalConfigSource,
    NumberField,
    OptionField,
    OptionItem,
    PlainField,
    StaticOptionsSource,
    TextareaField,
)

FORM_CONFIG_VERSION = "1.0.0"


def default_fields() -> list[FieldBase]:
    """每次调用都返回一组新的字段对象, 调用方可以放心修改."""
    return [
        # 基础信息
        OptionField(
            id="industry",
            field_key="industryId",
            label="Industry",
            placeholder="Select industry...",
            type="db-dropdown",
            data_source=DatabaseSource(table="industries"),
            required=True,
            order=0,
            category="basic",
        ),
        OptionField(
            id="profile",
            field_key="profileId",
            label="Profile / Admin",
            placeholder="Select profile...",
            type="db-dropdown",
            data_source=DatabaseSource(table="profile_list"),
            required=True,
            order=1,
            category="basic",
        ),
        PlainField(
            id="reference-url",
            field_key="referenceUrl",
            label="Reference Link",
            placeholder="https://www.instagram.com/reel/example or https://youtube.com/watch?v=...",
            help_text="Paste the link to the viral content you want to analyze",
            type="url",
            required=True,
            order=2,
            category="basic",
        ),
        OptionField(
            id="hook-tags",
            field_key="hookTagIds",
            label="Hook Tags",
            placeholder="Select hook types...",
            type="multi-select",
            data_source=DatabaseSource(table="hook_tags"),
            required=True,
            order=3,
            category="basic",
        ),
        # 内容分析
        DividerField(
            id="divider-content",
            field_key="_divider_content",
            label="Content Analysis",
            type="divider",
            order=4,
            category="content",
        ),
        TextareaField(
            id="hook",
            field_key="hook",
            label="Hook (First 6 Seconds)",
            placeholder="Describe the opening hook that grabs attention in the first 6 seconds...",
            help_text="Or record your explanation of the hook",
            type="textarea-voice",
            required=True,
            order=5,
            category="content",
            container_class="bg-gray-50",
            rows=3,
        ),
        TextareaField(
            id="why-viral",
            field_key="whyViral",
            label="Why Did It Go Viral?",
            placeholder="Analyze the key factors that made this content go viral...",
            help_text="Or record your viral analysis",
            type="textarea-voice",
            order=6,
            category="content",
            container_class="bg-blue-50",
            rows=3,
        ),
        TextareaField(
            id="how-to-replicate",
            field_key="howToReplicate",
            label="How to Replicate for Our Brand",
            placeholder="Explain step-by-step how we can adapt this viral format for our brand...",
            help_text="Or record your replication strategy",
            type="textarea-voice",
            order=7,
            category="content",
            container_class="bg-green-50",
            rows=4,
        ),
        OptionField(
            id="target-emotion",
            field_key="targetEmotion",
            label="What Emotions Are We Targeting?",
            placeholder="Select target emotion",
            type="dropdown",
            data_source=LocalConfigSource(key="target_emotions"),
            required=True,
            order=8,
            category="content",
        ),
        OptionField(
            id="expected-outcome",
            field_key="expectedOutcome",
            label="What Outcome Do We Expect?",
            placeholder="Select expected outcome",
            type="dropdown",
            data_source=LocalConfigSource(key="expected_outcomes"),
            required=True,
            order=9,
            category="content",
        ),
        # 拍摄信息
        DividerField(
            id="divider-production",
            field_key="_divider_production",
            label="Production Details",
            help_text="Additional information needed for video production",
            type="divider",
            order=10,
            category="production",
        ),
        TextareaField(
            id="on-screen-text",
            field_key="onScreenTextHook",
            label="On-Screen Text Hook",
            placeholder="Text that will appear on screen during the hook (e.g., 'live robbery (plus shocking emoji)')",
            help_text="The text overlay that will grab attention in the first few seconds",
            type="textarea",
            order=11,
            category="production",
            rows=2,
        ),
        PlainField(
            id="our-idea",
            field_key="ourIdeaAudio",
            label="Our Idea (Voice Note)",
            placeholder="Record your detailed idea for this content",
            help_text="Record your detailed idea and vision for this content",
            type="voice",
            order=12,
            category="production",
            container_class="bg-purple-50",
        ),
        PlainField(
            id="shoot-location",
            field_key="shootLocation",
            label="Location of the Shoot",
            placeholder="e.g., in store, outside store, client location",
            help_text="Where will this video be shot?",
            type="text",
            order=13,
            category="production",
        ),
        OptionField(
            id="shoot-possibility",
            field_key="shootPossibility",
            label="Possibility of Shoot",
            placeholder="Select shoot possibility",
            help_text="How confident are you that this can be shot successfully?",
            type="dropdown",
            data_source=StaticOptionsSource(
                options=[
                    OptionItem(value="100", label="100% - Definitely can shoot"),
                    OptionItem(value="75", label="75% - Very likely"),
                    OptionItem(value="50", label="50% - Moderate chance"),
                    OptionItem(value="25", label="25% - Challenging but possible"),
                ],
            ),
            required=True,
            order=14,
            category="production",
        ),
        NumberField(
            id="total-people",
            field_key="totalPeopleInvolved",
            label="Total People Involved",
            placeholder="1",
            type="number",
            order=15,
            category="production",
            min_value=1,
            max_value=100,
            step=1,
        ),
        OptionField(
            id="character-tags",
            field_key="characterTagIds",
            label="Character Tags",
            placeholder="Select characters involved...",
            type="multi-select",
            data_source=DatabaseSource(table="character_tags"),
            order=16,
            category="production",
        ),
    ]


def default_form_config(now: datetime) -> FormConfiguration:
    """构造默认配置文档."""
    return FormConfiguration(version=FORM_CONFIG_VERSION, last_updated=now, fields=default_fields())
