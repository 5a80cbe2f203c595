"""Order confirmation template: sent when an order is placed."""


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        total_amount = context.get("total_amount", "0.00")
        currency = context.get("currency", "USD")
        lines = context.get("lines", [])

        line_text = "\n".join(
            f"  {line['quantity']} x {line.get('product_name') or line['product_id']} @ {currency} {line['unit_price']}"
            for line in lines
        )
        return {
            "subject": f"Order #{order_number} Confirmed",
            "body": (
                f"Thank you for your order #{order_number}.\n\n"
                f"{line_text}\n\n"
                f"Order Total: {currency} {total_amount}\n\n"
                "We'll let you know when your order ships."
            ),
        }
