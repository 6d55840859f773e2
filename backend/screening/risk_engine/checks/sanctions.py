from screening.models import CheckKind, CheckStatus
from screening.risk_engine.checks.base import BaseScreeningCheck, normalize_name

MATCH_CONFIDENCE = 0.95


def match_entity(name: str, entities) -> str | None:
    if not name:
        return None
    for entity in sorted(entities):
        if entity and (entity in name or name in entity):
            return entity
    return None


class SanctionsCheck(BaseScreeningCheck):
    kind = CheckKind.SANCTIONS
    source_label = 'Sanctions Lists'
    version = 1

    def evaluate(self, subject, context):
        name = normalize_name(subject.name)
        sub_checks = {}
        for sanctions_list in context.data.sanctions_lists:
            matched_entity = match_entity(name, sanctions_list.entities)
            sub_checks[sanctions_list.key] = {
                'has_match': matched_entity is not None,
                'confidence': MATCH_CONFIDENCE if matched_entity else 0.0,
                'matched_entity': matched_entity,
                'list_version': sanctions_list.version,
                'source': sanctions_list.label,
            }

        matches = [item for item in sub_checks.values() if item['has_match']]
        versions = sorted(item['list_version'] for item in sub_checks.values())
        evidence = {
            'sub_checks': sub_checks,
            'matched_lists': [key for key, item in sub_checks.items() if item['has_match']],
        }

        if matches:
            return self.output(
                status=CheckStatus.FAIL,
                has_match=True,
                confidence=max(item['confidence'] for item in matches),
                matched_entity=matches[0]['matched_entity'],
                list_version=versions[-1] if versions else None,
                details='Potential sanctions match found.',
                evidence=evidence,
            )

        return self.output(
            status=CheckStatus.PASS,
            has_match=False,
            list_version=versions[-1] if versions else None,
            details='No sanctions matches found.',
            evidence=evidence,
        )
