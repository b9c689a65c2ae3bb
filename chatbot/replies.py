"""Keyword-scripted shopping assistant replies."""

SCRIPTED_REPLIES = [
    (
        ('product', 'item'),
        "I can help you find products! You can browse our categories like Electronics, Clothing, "
        "Home & Garden, Books, and Sports. What type of product are you looking for?",
    ),
    (
        ('price', 'cost', 'negotiate'),
        "You can negotiate prices with sellers using our negotiation feature! Just visit any product page "
        "and click the 'Negotiate Price' button to start a conversation with the seller.",
    ),
    (
        ('shipping', 'delivery'),
        "We offer various shipping options depending on the seller. Standard shipping is usually free for "
        "orders over $50, and express shipping is available for faster delivery.",
    ),
    (
        ('return', 'refund'),
        "Most items can be returned within 30 days of purchase. Check the product page for specific return "
        "policies, as they may vary by seller.",
    ),
    (
        ('account', 'profile'),
        "You can manage your account by clicking on your profile icon in the top navigation. There you can "
        "update your information, view orders, and manage your seller status.",
    ),
]

GREETING = (
    "Hello! I'm your AI shopping assistant. I can help you with product recommendations, price negotiations, "
    "shipping information, returns, and general questions about our store. What would you like to know?"
)


def reply_to(message: str) -> str:
    """First matching topic wins, in the order listed above."""
    lowered = message.lower()
    for keywords, reply in SCRIPTED_REPLIES:
        if any(keyword in lowered for keyword in keywords):
            return reply
    return GREETING
