"""GraphQL feature flags and field toggles sent with each operation.

X rejects requests that omit flags the current web client sends, so every
operation starts from the shared timeline set and layers its own additions.
"""

from typing import Any

_TIMELINE_FEATURES: dict[str, bool] = {
    "rweb_video_screen_enabled": False,
    "profile_label_improvements_pcf_label_in_post_enabled": True,
    "rweb_tipjar_consumption_enabled": True,
    "verified_phone_label_enabled": False,
    "creator_subscriptions_tweet_preview_api_enabled": True,
    "responsive_web_graphql_timeline_navigation_enabled": True,
    "responsive_web_graphql_skip_user_profile_image_extensions_enabled": False,
    "premium_content_api_read_enabled": False,
    "communities_web_enable_tweet_community_results_fetch": True,
    "c9s_tweet_anatomy_moderator_badge_enabled": True,
    "responsive_web_grok_analyze_button_fetch_trends_enabled": False,
    "responsive_web_grok_analyze_post_followups_enabled": True,
    "responsive_web_jetfuel_frame": False,
    "responsive_web_grok_share_attachment_enabled": True,
    "articles_preview_enabled": True,
    "responsive_web_edit_tweet_api_enabled": True,
    "graphql_is_translatable_rweb_tweet_is_translatable_enabled": True,
    "view_counts_everywhere_api_enabled": True,
    "longform_notetweets_consumption_enabled": True,
    "responsive_web_twitter_article_tweet_consumption_enabled": True,
    "tweet_awards_web_tipping_enabled": False,
    "responsive_web_grok_show_grok_translated_post": False,
    "responsive_web_grok_analysis_button_from_backend": True,
    "creator_subscriptions_quote_tweet_preview_enabled": False,
    "freedom_of_speech_not_reach_fetch_enabled": True,
    "standardized_nudges_misinfo": True,
    "tweet_with_visibility_results_prefer_gql_limited_actions_policy_enabled": True,
    "longform_notetweets_rich_text_read_enabled": True,
    "longform_notetweets_inline_media_enabled": True,
    "responsive_web_grok_image_annotation_enabled": True,
    "responsive_web_enhance_cards_enabled": False,
}


def _timeline_features(**overrides: bool) -> dict[str, bool]:
    features = dict(_TIMELINE_FEATURES)
    features.update(overrides)
    return features


def search_features() -> dict[str, bool]:
    return _timeline_features()


def tweet_detail_features() -> dict[str, bool]:
    return _timeline_features(
        articles_rest_api_enabled=True,
        rweb_video_timestamps_enabled=True,
    )


def user_tweets_features() -> dict[str, bool]:
    return _timeline_features()


def bookmarks_features() -> dict[str, bool]:
    return _timeline_features(graphql_timeline_v2_bookmark_timeline=True)


def follow_list_features() -> dict[str, bool]:
    return _timeline_features()


def user_by_screen_name_features() -> dict[str, bool]:
    return {
        "hidden_profile_subscriptions_enabled": True,
        "hidden_profile_likes_enabled": True,
        "rweb_tipjar_consumption_enabled": True,
        "responsive_web_graphql_exclude_directive_enabled": True,
        "verified_phone_label_enabled": False,
        "subscriptions_verification_info_is_identity_verified_enabled": True,
        "subscriptions_verification_info_verified_since_enabled": True,
        "highlights_tweets_tab_ui_enabled": True,
        "responsive_web_twitter_article_notes_tab_enabled": True,
        "subscriptions_feature_can_gift_premium": True,
        "creator_subscriptions_tweet_preview_api_enabled": True,
        "responsive_web_graphql_skip_user_profile_image_extensions_enabled": False,
        "responsive_web_graphql_timeline_navigation_enabled": True,
        "blue_business_profile_image_shape_enabled": True,
    }


def tweet_detail_field_toggles() -> dict[str, Any]:
    return {
        "withArticleRichContentState": True,
        "withArticlePlainText": True,
        "withGrokAnalyze": False,
        "withDisallowedReplyControls": False,
    }


def user_tweets_field_toggles() -> dict[str, Any]:
    return {"withArticlePlainText": False}


def user_by_screen_name_field_toggles() -> dict[str, Any]:
    return {"withAuxiliaryUserLabels": False}
