import sys

from .interface.api_interface import get_recommendations


def demo_user_recommendation(user_id: str):
    print(f"=== User {user_id} Recommendations (Rule-based) ===")
    recs = get_recommendations(user_id)
    for section in ("colleges", "careers"):
        print(f"--- {section} ---")
        for r in recs[section]:
            item = r.get("college") or r.get("career") or {}
            print(f"{item.get('name')} (score={r['score']}) {r['reasons']}")
    print("--- courses ---")
    for r in recs["courses"]:
        print(f"{r['course']} (score={r['score']}) {r['reasons']}")
    for insight in recs["insights"]:
        print(f"[{insight['type']}] {insight['title']}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        sys.exit("usage: python -m advisor.main <user_id>")
    demo_user_recommendation(sys.argv[1])
