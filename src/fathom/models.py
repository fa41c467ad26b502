"""
Shapes of Fathom API responses.

Responses are handed back to callers exactly as Fathom sent them, so these
are typing-only descriptions of the decoded JSON, not parsing models. Any key
may be missing or null, and keys not listed here are passed through too.
"""

from typing import List, Optional, TypedDict, Union


class FathomUser(TypedDict, total=False):
    name: Optional[str]
    email: Optional[str]
    email_domain: Optional[str]
    team: Optional[str]


class CalendarInvitee(TypedDict, total=False):
    name: Optional[str]
    matched_speaker_display_name: Optional[str]
    email: Optional[str]
    email_domain: Optional[str]
    is_external: Optional[bool]


class Speaker(TypedDict, total=False):
    display_name: Optional[str]
    matched_calendar_invitee_email: Optional[str]


class TranscriptEntry(TypedDict, total=False):
    """One utterance in a recording transcript."""
    speaker: Optional[Speaker]
    text: Optional[str]
    timestamp: Optional[str]


class Summary(TypedDict, total=False):
    """Meeting summary rendered from a Fathom template."""
    template_name: Optional[str]
    markdown_formatted: Optional[str]


class ActionItem(TypedDict, total=False):
    description: Optional[str]
    user_generated: Optional[bool]
    completed: Optional[bool]
    recording_timestamp: Optional[str]
    recording_playback_url: Optional[str]
    assignee: Optional[FathomUser]


class CrmContact(TypedDict, total=False):
    name: Optional[str]
    email: Optional[str]
    record_url: Optional[str]


class CrmCompany(TypedDict, total=False):
    name: Optional[str]
    record_url: Optional[str]


class CrmDeal(TypedDict, total=False):
    name: Optional[str]
    amount: Optional[Union[int, float]]
    record_url: Optional[str]


class CrmMatches(TypedDict, total=False):
    contacts: Optional[List[CrmContact]]
    companies: Optional[List[CrmCompany]]
    deals: Optional[List[CrmDeal]]
    error: Optional[str]


class Meeting(TypedDict, total=False):
    """
    A recorded meeting.

    transcript, default_summary, action_items and crm_matches are only
    present when the matching include_* option was requested.
    """
    title: Optional[str]
    meeting_title: Optional[str]
    recording_id: Optional[int]
    url: Optional[str]
    share_url: Optional[str]
    created_at: Optional[str]
    scheduled_start_time: Optional[str]
    scheduled_end_time: Optional[str]
    recording_start_time: Optional[str]
    recording_end_time: Optional[str]
    calendar_invitees_domains_type: Optional[str]
    transcript_language: Optional[str]
    transcript: Optional[List[TranscriptEntry]]
    default_summary: Optional[Summary]
    action_items: Optional[List[ActionItem]]
    calendar_invitees: Optional[List[CalendarInvitee]]
    recorded_by: Optional[FathomUser]
    crm_matches: Optional[CrmMatches]


class Team(TypedDict, total=False):
    id: Optional[str]
    name: Optional[str]
    created_at: Optional[str]
    updated_at: Optional[str]


class TeamMember(TypedDict, total=False):
    id: Optional[str]
    name: Optional[str]
    email: Optional[str]
    team_id: Optional[str]
    created_at: Optional[str]
    updated_at: Optional[str]


# A page of results. next_cursor is opaque and passed back verbatim.

class MeetingPage(TypedDict, total=False):
    limit: Optional[int]
    next_cursor: Optional[str]
    items: Optional[List[Meeting]]


class TeamPage(TypedDict, total=False):
    limit: Optional[int]
    next_cursor: Optional[str]
    items: Optional[List[Team]]


class TeamMemberPage(TypedDict, total=False):
    limit: Optional[int]
    next_cursor: Optional[str]
    items: Optional[List[TeamMember]]
